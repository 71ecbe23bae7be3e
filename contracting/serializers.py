from rest_framework import serializers

from accounts.display_names import resolve_display_name

from .models import ConstructionRequest, RenovationRequest

COMMON_FIELDS = [
    "id", "user", "requester_name", "provider", "provider_name", "property", "budget", "status",
    "conversation", "progress_note", "is_assigned", "created_at", "updated_at",
]


class ServiceRequestSerializer(serializers.ModelSerializer):
    requester_name = serializers.SerializerMethodField()
    provider_name = serializers.SerializerMethodField()
    is_assigned = serializers.SerializerMethodField()

    def get_requester_name(self, obj):
        return resolve_display_name(obj.user_id)

    def get_provider_name(self, obj):
        return resolve_display_name(obj.provider_id) if obj.provider_id else None

    def get_is_assigned(self, obj):
        return getattr(obj, "is_assigned", obj.provider_id is not None)


class ConstructionRequestSerializer(ServiceRequestSerializer):
    class Meta:
        model = ConstructionRequest
        fields = COMMON_FIELDS + ["project_type", "description", "start_date", "end_date"]
        read_only_fields = fields


class RenovationRequestSerializer(ServiceRequestSerializer):
    class Meta:
        model = RenovationRequest
        fields = COMMON_FIELDS + ["service_category", "detailed_description", "preferred_date", "photos"]
        read_only_fields = fields


class ProjectStatusSerializer(serializers.Serializer):
    status = serializers.CharField(max_length=32)
    progress_note = serializers.CharField(required=False, allow_blank=True)
