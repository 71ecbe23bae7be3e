"""
Back-office API for platform admins.

Every endpoint here requires the admin role (or a superuser). Moderation
actions answer in the ``{"status": "ok", "message": ..., "data": ...}`` toast
shape so the dashboard can show the outcome directly.
"""
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts import services as accounts_services
from accounts.serializers import ServiceProviderSerializer, UserSerializer
from common.permissions import IsPlatformAdmin
from common.views import ok
from contracting.serializers import ConstructionRequestSerializer, RenovationRequestSerializer
from marketplace import services as marketplace_services
from marketplace.serializers import ListingSerializer
from notifications import broadcast
from notifications.serializers import BroadcastJobSerializer, BroadcastRequestSerializer
from properties import services as property_services
from properties.models import PropertyStatus
from properties.serializers import BuySellRequestSerializer, PropertySerializer, RentalRequestSerializer
from reviews import services as review_services

from . import services
from .serializers import ReasonSerializer, RoleSerializer, SuspendSerializer

REQUEST_SERIALIZERS = {
    "rental": RentalRequestSerializer,
    "buySell": BuySellRequestSerializer,
    "construction": ConstructionRequestSerializer,
    "renovation": RenovationRequestSerializer,
}


def _filters(request):
    return request.query_params.get("search", ""), request.query_params.get("status") or None


class AdminViewSet(viewsets.ViewSet):
    permission_classes = [IsPlatformAdmin]


class DashboardView(APIView):
    permission_classes = [IsPlatformAdmin]

    def get(self, request):
        return Response(services.dashboard_stats())


class UserAdminViewSet(AdminViewSet):
    def list(self, request):
        return Response(UserSerializer(services.list_users(*_filters(request)), many=True).data)

    @action(detail=True, methods=["post"])
    def suspend(self, request, pk=None):
        serializer = SuspendSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        suspended = serializer.validated_data["suspended"]
        user = accounts_services.set_suspended(pk, suspended)
        return ok("User suspended" if suspended else "User reactivated", UserSerializer(user).data)

    @action(detail=True, methods=["post"])
    def role(self, request, pk=None):
        serializer = RoleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = accounts_services.set_role(pk, serializer.validated_data["role"])
        return ok("Role updated", UserSerializer(user).data)


class ProviderAdminViewSet(AdminViewSet):
    def list(self, request):
        return Response(ServiceProviderSerializer(services.list_providers(*_filters(request)), many=True).data)

    @action(detail=True, methods=["post"])
    def approve(self, request, pk=None):
        provider = accounts_services.approve_provider(pk)
        return ok("Provider approved", ServiceProviderSerializer(provider).data)

    @action(detail=True, methods=["post"])
    def reject(self, request, pk=None):
        serializer = ReasonSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        provider = accounts_services.reject_provider(pk, serializer.validated_data.get("reason", ""))
        return ok("Provider rejected", ServiceProviderSerializer(provider).data)


class PropertyAdminViewSet(AdminViewSet):
    def list(self, request):
        return Response(PropertySerializer(services.list_properties(*_filters(request)), many=True).data)

    @action(detail=True, methods=["post"])
    def publish(self, request, pk=None):
        prop = property_services.update_property_status(pk, PropertyStatus.PUBLISHED)
        return ok("Property published", PropertySerializer(prop).data)

    @action(detail=True, methods=["post"])
    def suspend(self, request, pk=None):
        prop = property_services.update_property_status(pk, PropertyStatus.SUSPENDED)
        return ok("Property suspended", PropertySerializer(prop).data)


class ListingAdminViewSet(AdminViewSet):
    def list(self, request):
        return Response(ListingSerializer(services.list_listings(*_filters(request)), many=True).data)

    @action(detail=True, methods=["post"])
    def approve(self, request, pk=None):
        listing = marketplace_services.approve_listing(pk)
        return ok("Listing approved", ListingSerializer(listing).data)

    @action(detail=True, methods=["post"])
    def reject(self, request, pk=None):
        serializer = ReasonSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        listing = marketplace_services.reject_listing(pk, serializer.validated_data.get("reason", ""))
        return ok("Listing rejected", ListingSerializer(listing).data)


class RequestAdminView(APIView):
    """Requests of one kind (rental, buySell, construction, renovation)."""
    permission_classes = [IsPlatformAdmin]

    def get(self, request, kind):
        rows = services.list_requests(kind, *_filters(request))
        return Response(REQUEST_SERIALIZERS[kind](rows, many=True).data)


class ReviewAdminViewSet(AdminViewSet):
    def destroy(self, request, pk=None):
        review_services.delete(pk)
        return ok("Review deleted")


class BroadcastViewSet(AdminViewSet):
    """Bulk notifications: start, confirm and progress."""

    def create(self, request):
        serializer = BroadcastRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        job = broadcast.start_broadcast(
            request.user,
            data["title"],
            data["message"],
            data["audience"],
            single_uid=data.get("single_uid"),
            confirmed=data.get("confirmed", False),
            link=data.get("link", ""),
        )
        return ok(f"Notification sent to {job.sent} of {job.total} users", BroadcastJobSerializer(job).data)

    @action(detail=True, methods=["post"])
    def confirm(self, request, pk=None):
        job = broadcast.confirm_broadcast(pk, request.user)
        return ok(f"Notification sent to {job.sent} of {job.total} users", BroadcastJobSerializer(job).data)

    def retrieve(self, request, pk=None):
        return Response(broadcast.get_progress(pk))
