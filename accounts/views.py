"""
Accounts API: signup, the current user's account and profile, service
provider registration and saved favorites.
"""
import logging

from django.contrib.auth import get_user_model
from rest_framework import generics, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from common.permissions import IsActiveMember
from common.views import ok

from . import favorites, services
from .display_names import resolve_display_name
from .models import ServiceProvider
from .serializers import (
    FavoriteSerializer,
    FavoriteTargetSerializer,
    ProfileSerializer,
    ProviderRegistrationSerializer,
    ServiceProviderSerializer,
    SignupSerializer,
    UserSerializer,
)

logger = logging.getLogger(__name__)

User = get_user_model()


class SignupView(generics.CreateAPIView):
    """Allow visitors to create a customer account."""
    serializer_class = SignupSerializer
    permission_classes = [AllowAny]
    authentication_classes = []

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        logger.info("signup: created user %s", user.pk)
        return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)


class MeView(generics.RetrieveUpdateAPIView):
    serializer_class = UserSerializer
    permission_classes = [IsAuthenticated]

    def get_object(self):
        return self.request.user


class ProfileView(generics.RetrieveUpdateAPIView):
    serializer_class = ProfileSerializer
    permission_classes = [IsAuthenticated]

    def get_object(self):
        return self.request.user.profile


class DisplayNameView(generics.GenericAPIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, user_id):
        return Response({"id": user_id, "display_name": resolve_display_name(user_id)})


class ServiceProviderViewSet(viewsets.ReadOnlyModelViewSet):
    """Approved providers for everyone; ``mine`` and ``register`` for the caller."""
    serializer_class = ServiceProviderSerializer
    permission_classes = [IsActiveMember]

    def get_queryset(self):
        qs = ServiceProvider.objects.filter(is_approved=True).select_related("user")
        service_type = self.request.query_params.get("service_type")
        if service_type:
            qs = qs.filter(service_type=service_type)
        return qs

    @action(detail=False, methods=["get"])
    def mine(self, request):
        rows = ServiceProvider.objects.filter(user=request.user)
        return Response(self.get_serializer(rows, many=True).data)

    @action(detail=False, methods=["post"])
    def register(self, request):
        serializer = ProviderRegistrationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        provider = services.register_provider(
            request.user,
            data.pop("service_type"),
            data.pop("business_name"),
            **data,
        )
        return Response(self.get_serializer(provider).data, status=status.HTTP_201_CREATED)


class FavoriteViewSet(viewsets.ViewSet):
    """The caller's saved properties and listings."""
    permission_classes = [IsActiveMember]

    def _target(self, request):
        serializer = FavoriteTargetSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return serializer.validated_data["target_type"], serializer.validated_data["target_id"]

    def list(self, request):
        rows = favorites.get_favorites(request.user.id, request.query_params.get("target_type"))
        return Response(FavoriteSerializer(rows, many=True).data)

    def create(self, request):
        favorite = favorites.add_to_favorites(request.user.id, *self._target(request))
        return Response(FavoriteSerializer(favorite).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["post"])
    def remove(self, request):
        removed = favorites.remove_from_favorites(request.user.id, *self._target(request))
        return ok("Removed from favorites" if removed else "Not in favorites", {"favorite": False})

    @action(detail=False, methods=["post"])
    def toggle(self, request):
        now_favorite = favorites.toggle_favorite(request.user.id, *self._target(request))
        return ok("Added to favorites" if now_favorite else "Removed from favorites", {"favorite": now_favorite})
