from django.contrib.auth import get_user_model
from rest_framework import serializers

from .display_names import resolve_display_name
from .models import Favorite, Profile, ServiceProvider, ServiceType

User = get_user_model()


class ProfileSerializer(serializers.ModelSerializer):
    class Meta:
        model = Profile
        fields = ["display_name", "bio", "city", "phone", "avatar"]


class UserSerializer(serializers.ModelSerializer):
    display_name = serializers.SerializerMethodField()
    profile = ProfileSerializer(read_only=True)

    class Meta:
        model = User
        fields = [
            "id", "username", "email", "first_name", "last_name", "display_name",
            "role", "is_suspended", "is_provider_approved", "email_notifications",
            "date_joined", "profile",
        ]
        read_only_fields = ["id", "username", "role", "is_suspended", "is_provider_approved", "date_joined"]

    def get_display_name(self, obj):
        return resolve_display_name(obj.pk)


class SignupSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, min_length=8)

    class Meta:
        model = User
        fields = ["username", "email", "password", "first_name", "last_name", "phone"]

    def validate_email(self, value):
        if not value:
            raise serializers.ValidationError("Email is required.")
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError("An account with this email already exists.")
        return value.lower()

    def create(self, validated_data):
        password = validated_data.pop("password")
        return User.objects.create_user(password=password, **validated_data)


class ServiceProviderSerializer(serializers.ModelSerializer):
    user_name = serializers.SerializerMethodField()

    class Meta:
        model = ServiceProvider
        fields = [
            "id", "user", "user_name", "service_type", "business_name", "description", "phone",
            "city", "experience_years", "is_approved", "rejected_reason", "approved_at", "created_at",
        ]
        read_only_fields = ["id", "user", "is_approved", "rejected_reason", "approved_at", "created_at"]

    def get_user_name(self, obj):
        return resolve_display_name(obj.user_id)


class ProviderRegistrationSerializer(serializers.Serializer):
    service_type = serializers.ChoiceField(choices=ServiceType.choices)
    business_name = serializers.CharField(max_length=160)
    description = serializers.CharField(required=False, allow_blank=True)
    phone = serializers.CharField(required=False, allow_blank=True)
    city = serializers.CharField(required=False, allow_blank=True)
    experience_years = serializers.IntegerField(required=False, min_value=0)


class FavoriteSerializer(serializers.ModelSerializer):
    class Meta:
        model = Favorite
        fields = ["id", "target_type", "target_id", "created_at"]
        read_only_fields = fields


class FavoriteTargetSerializer(serializers.Serializer):
    target_type = serializers.CharField(max_length=16)
    target_id = serializers.IntegerField(min_value=1)
