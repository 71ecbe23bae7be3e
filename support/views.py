from django.core.exceptions import PermissionDenied
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from common.permissions import IsActiveMember, IsPlatformAdmin, is_platform_admin
from common.views import request_payload

from . import services
from .serializers import ReplySerializer, SupportReplySerializer, SupportTicketSerializer, TicketStatusSerializer


class SupportTicketViewSet(viewsets.ViewSet):
    """Members see their own tickets; admins see and manage all of them."""
    permission_classes = [IsActiveMember]

    def get_permissions(self):
        if self.action in ("set_status", "destroy"):
            return [IsPlatformAdmin()]
        return super().get_permissions()

    def _visible(self, pk):
        ticket = services.get_by_id(pk)
        if ticket.user_id != self.request.user.id and not is_platform_admin(self.request.user):
            raise PermissionDenied("You cannot access this ticket")
        return ticket

    def list(self, request):
        if is_platform_admin(request.user) and request.query_params.get("scope") == "all":
            rows = services.get_all(request.query_params.get("status"))
        else:
            rows = services.get_by_user(request.user.id)
        return Response(SupportTicketSerializer(rows, many=True).data)

    def retrieve(self, request, pk=None):
        return Response(SupportTicketSerializer(self._visible(pk)).data)

    def create(self, request):
        ticket = services.create(request.user, request_payload(request))
        return Response(SupportTicketSerializer(ticket).data, status=status.HTTP_201_CREATED)

    def destroy(self, request, pk=None):
        services.delete(pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["get", "post"])
    def replies(self, request, pk=None):
        self._visible(pk)
        if request.method == "GET":
            return Response(SupportReplySerializer(services.list_replies(pk), many=True).data)
        serializer = ReplySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        entry = services.reply(pk, request.user, serializer.validated_data["text"])
        return Response(SupportReplySerializer(entry).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"], url_path="status")
    def set_status(self, request, pk=None):
        serializer = TicketStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        ticket = services.update_status(pk, serializer.validated_data["status"])
        return Response(SupportTicketSerializer(ticket).data)
