from rest_framework import serializers

from accounts.models import Role


class SuspendSerializer(serializers.Serializer):
    suspended = serializers.BooleanField()


class RoleSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=Role.choices)


class ReasonSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=1000, required=False, allow_blank=True)
