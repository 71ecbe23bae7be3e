from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from . import dispatch
from .models import Notification
from .serializers import NotificationSerializer


class NotificationViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """The caller's notifications, newest first."""
    serializer_class = NotificationSerializer

    def get_queryset(self):
        return Notification.objects.filter(user=self.request.user)

    def list(self, request, *args, **kwargs):
        unread_only = request.query_params.get("unread") in ("1", "true", "yes")
        limit = request.query_params.get("limit")
        rows = dispatch.list_for_user(
            request.user.id,
            unread_only=unread_only,
            limit=int(limit) if limit and limit.isdigit() else None,
        )
        return Response(
            {
                "results": self.get_serializer(rows, many=True).data,
                "unread": dispatch.unread_count(request.user.id),
            }
        )

    def destroy(self, request, pk=None):
        dispatch.delete(pk, user_id=request.user.id)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post"])
    def read(self, request, pk=None):
        notification = dispatch.mark_read(pk, user_id=request.user.id)
        return Response(self.get_serializer(notification).data)

    @action(detail=False, methods=["post"], url_path="read-all")
    def read_all(self, request):
        updated = dispatch.mark_all_read(request.user.id)
        return Response({"status": "ok", "updated": updated, "unread": 0})

    @action(detail=False, methods=["get"], url_path="unread-count")
    def unread_count(self, request):
        return Response({"unread": dispatch.unread_count(request.user.id)})

    @action(detail=False, methods=["post"], url_path="clear-all")
    def clear_all(self, request):
        deleted = dispatch.clear_all(request.user.id)
        return Response({"status": "ok", "deleted": deleted, "unread": 0})
