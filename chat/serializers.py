from rest_framework import serializers

from accounts.display_names import resolve_display_name

from .models import ChatMessage, Conversation


class ChatMessageSerializer(serializers.ModelSerializer):
    class Meta:
        model = ChatMessage
        fields = ["id", "conversation", "sender", "text", "read", "created_at"]
        read_only_fields = fields


class ConversationSerializer(serializers.ModelSerializer):
    other_user = serializers.SerializerMethodField()
    other_user_name = serializers.SerializerMethodField()
    unread = serializers.SerializerMethodField()

    class Meta:
        model = Conversation
        fields = ["id", "other_user", "other_user_name", "last_message", "last_message_at", "unread", "created_at"]
        read_only_fields = fields

    def _viewer_id(self):
        request = self.context.get("request")
        return getattr(getattr(request, "user", None), "id", None)

    def get_other_user(self, obj):
        return obj.other_participant(self._viewer_id())

    def get_other_user_name(self, obj):
        return resolve_display_name(obj.other_participant(self._viewer_id()))

    def get_unread(self, obj):
        return obj.unread_for(self._viewer_id())


class StartConversationSerializer(serializers.Serializer):
    user_id = serializers.IntegerField()


class PostMessageSerializer(serializers.Serializer):
    text = serializers.CharField(max_length=4000, trim_whitespace=True)
