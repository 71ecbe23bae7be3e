from rest_framework import serializers

from .models import Audience, BroadcastJob, Notification


class NotificationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Notification
        fields = ["id", "title", "message", "type", "link", "read", "read_at", "is_broadcast", "created_at"]
        read_only_fields = fields


class BroadcastRequestSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=200)
    message = serializers.CharField()
    audience = serializers.ChoiceField(choices=Audience.choices)
    single_uid = serializers.IntegerField(required=False, allow_null=True)
    link = serializers.CharField(required=False, allow_blank=True, max_length=300)
    confirmed = serializers.BooleanField(required=False, default=False)


class BroadcastJobSerializer(serializers.ModelSerializer):
    class Meta:
        model = BroadcastJob
        fields = [
            "id", "title", "message", "audience", "single_uid", "total", "sent", "batches",
            "status", "error", "confirmed_at", "finished_at", "created_at",
        ]
        read_only_fields = fields
