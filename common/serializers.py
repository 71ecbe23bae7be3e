from rest_framework import serializers

from accounts.display_names import resolve_display_name

from .models import RequestUpdate


class RequestUpdateSerializer(serializers.ModelSerializer):
    updated_by_name = serializers.SerializerMethodField()

    class Meta:
        model = RequestUpdate
        fields = ["id", "status", "updated_by", "updated_by_name", "note", "created_at"]
        read_only_fields = fields

    def get_updated_by_name(self, obj):
        return resolve_display_name(obj.updated_by_id) if obj.updated_by_id else ""
