from rest_framework import serializers

from accounts.display_names import resolve_display_name

from .models import BuySellRequest, Property, RentalRequest


class PropertySerializer(serializers.ModelSerializer):
    owner_name = serializers.SerializerMethodField()

    class Meta:
        model = Property
        fields = [
            "id", "owner", "owner_name", "title", "description", "listing_type", "price", "currency",
            "address", "city", "bedrooms", "bathrooms", "area_sqft", "furnished", "parking",
            "photos", "cover_image", "status", "views", "favorites_count", "created_at", "updated_at",
        ]
        read_only_fields = [
            "id", "owner", "photos", "cover_image", "status", "views", "favorites_count", "created_at", "updated_at",
        ]

    def get_owner_name(self, obj):
        return resolve_display_name(obj.owner_id)


class RentalRequestSerializer(serializers.ModelSerializer):
    property_title = serializers.CharField(source="property.title", read_only=True)
    requester_name = serializers.SerializerMethodField()

    class Meta:
        model = RentalRequest
        fields = [
            "id", "user", "requester_name", "property", "property_title", "landlord", "duration_months",
            "budget", "move_in_date", "message", "status", "created_at", "updated_at",
        ]
        read_only_fields = fields

    def get_requester_name(self, obj):
        return resolve_display_name(obj.user_id)


class BuySellRequestSerializer(serializers.ModelSerializer):
    property_title = serializers.CharField(source="property.title", read_only=True)
    requester_name = serializers.SerializerMethodField()

    class Meta:
        model = BuySellRequest
        fields = [
            "id", "user", "requester_name", "property", "property_title", "owner", "offer_amount",
            "message", "status", "created_at", "updated_at",
        ]
        read_only_fields = fields

    def get_requester_name(self, obj):
        return resolve_display_name(obj.user_id)


class StatusSerializer(serializers.Serializer):
    status = serializers.CharField(max_length=32)
    note = serializers.CharField(required=False, allow_blank=True, max_length=1000)
