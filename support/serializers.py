from rest_framework import serializers

from accounts.display_names import resolve_display_name

from .models import SupportReply, SupportTicket


class SupportReplySerializer(serializers.ModelSerializer):
    sender_name = serializers.SerializerMethodField()

    class Meta:
        model = SupportReply
        fields = ["id", "ticket", "sender", "sender_name", "text", "is_admin", "created_at"]
        read_only_fields = fields

    def get_sender_name(self, obj):
        return resolve_display_name(obj.sender_id)


class SupportTicketSerializer(serializers.ModelSerializer):
    class Meta:
        model = SupportTicket
        fields = [
            "id", "user", "name", "email", "subject", "message", "status", "priority",
            "assigned_admin", "conversation", "created_at", "updated_at",
        ]
        read_only_fields = fields


class ReplySerializer(serializers.Serializer):
    text = serializers.CharField(max_length=5000)


class TicketStatusSerializer(serializers.Serializer):
    status = serializers.CharField(max_length=16)
