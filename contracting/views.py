from django.core.exceptions import PermissionDenied
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from common.permissions import IsActiveMember, is_platform_admin
from common.serializers import RequestUpdateSerializer
from common.views import request_payload

from .models import ProjectStatus
from .serializers import ConstructionRequestSerializer, ProjectStatusSerializer, RenovationRequestSerializer
from .services import construction_requests, renovation_requests


class ServiceRequestViewSet(viewsets.ViewSet):
    """Requester and provider endpoints for one kind of service request."""
    permission_classes = [IsActiveMember]
    service = None
    serializer_class = None

    def _serialize(self, obj, many=False):
        return self.serializer_class(obj, many=many).data

    def _is_provider(self, user):
        return user.provider_profiles.filter(service_type=self.service.service_type, is_approved=True).exists()

    def list(self, request):
        return Response(self._serialize(self.service.get_by_user(request.user.id), many=True))

    @action(detail=False, methods=["get"])
    def incoming(self, request):
        if not self._is_provider(request.user):
            raise PermissionDenied("Approved provider access required")
        return Response(self._serialize(self.service.get_by_provider(request.user.id), many=True))

    def _visible(self, pk):
        obj = self.service.get_by_id(pk)
        user = self.request.user
        allowed = user.id in (obj.user_id, obj.provider_id) or (obj.provider_id is None and self._is_provider(user))
        if not allowed and not is_platform_admin(user):
            raise PermissionDenied("You cannot view this request")
        return obj

    def retrieve(self, request, pk=None):
        return Response(self._serialize(self._visible(pk)))

    @action(detail=True, methods=["get"])
    def updates(self, request, pk=None):
        self._visible(pk)
        return Response(RequestUpdateSerializer(self.service.get_updates(pk), many=True).data)

    def create(self, request):
        obj = self.service.create(request_payload(request, user_id=request.user.id))
        return Response(self._serialize(obj), status=status.HTTP_201_CREATED)

    def destroy(self, request, pk=None):
        obj = self.service.get_by_id(pk)
        if obj.user_id != request.user.id and not is_platform_admin(request.user):
            raise PermissionDenied("You cannot delete this request")
        self.service.delete(pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post"], url_path="status")
    def set_status(self, request, pk=None):
        serializer = ProjectStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        target = self.service.workflow.normalize(serializer.validated_data["status"])
        obj = self.service.get_by_id(pk)
        user = request.user
        provider_id = None
        if not is_platform_admin(user):
            if obj.provider_id not in (None, user.id) or not self._is_provider(user):
                raise PermissionDenied("Only the assigned provider can change this request")
            # Providers can only claim an open request
            if obj.provider_id is None and target != ProjectStatus.ACCEPTED:
                raise PermissionDenied("Accept this request before changing its status")
            if target == ProjectStatus.ACCEPTED:
                provider_id = user.id
        obj = self.service.update_status(
            pk,
            target,
            provider_id=provider_id,
            updated_by=user.id,
            progress_note=serializer.validated_data.get("progress_note", ""),
        )
        return Response(self._serialize(obj))


class ConstructionRequestViewSet(ServiceRequestViewSet):
    service = construction_requests
    serializer_class = ConstructionRequestSerializer


class RenovationRequestViewSet(ServiceRequestViewSet):
    service = renovation_requests
    serializer_class = RenovationRequestSerializer
