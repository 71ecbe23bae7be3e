from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from common.permissions import IsActiveMember

from . import services
from .serializers import (
    ChatMessageSerializer,
    ConversationSerializer,
    PostMessageSerializer,
    StartConversationSerializer,
)


class ConversationViewSet(viewsets.ViewSet):
    """The caller's conversations and their messages."""
    permission_classes = [IsActiveMember]

    def _serialize(self, conversation):
        return ConversationSerializer(conversation, context={"request": self.request}).data

    def list(self, request):
        rows = services.list_for_user(request.user.id)
        return Response(ConversationSerializer(rows, many=True, context={"request": request}).data)

    def retrieve(self, request, pk=None):
        return Response(self._serialize(services.get_conversation(pk, request.user.id)))

    def create(self, request):
        serializer = StartConversationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        conversation, created = services.get_or_create_conversation(request.user.id, serializer.validated_data["user_id"])
        return Response(
            self._serialize(conversation),
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )

    @action(detail=True, methods=["get", "post"])
    def messages(self, request, pk=None):
        if request.method == "POST":
            serializer = PostMessageSerializer(data=request.data)
            serializer.is_valid(raise_exception=True)
            message = services.post_message(pk, request.user.id, serializer.validated_data["text"])
            return Response(ChatMessageSerializer(message).data, status=status.HTTP_201_CREATED)
        rows = services.list_messages(pk, request.user.id)
        return Response(ChatMessageSerializer(rows, many=True).data)

    @action(detail=True, methods=["post"])
    def read(self, request, pk=None):
        updated = services.mark_read(pk, request.user.id)
        return Response({"status": "ok", "updated": updated})
