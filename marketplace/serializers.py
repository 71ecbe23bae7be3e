from rest_framework import serializers

from accounts.display_names import resolve_display_name

from .models import MarketplaceListing, Offer, Order


class ListingSerializer(serializers.ModelSerializer):
    seller_name = serializers.SerializerMethodField()

    class Meta:
        model = MarketplaceListing
        fields = [
            "id", "seller", "seller_name", "title", "description", "price", "currency", "category",
            "location", "city", "condition", "status", "images", "cover_image", "views",
            "favorites_count", "rejected_reason", "approved_at", "created_at", "updated_at",
        ]
        read_only_fields = fields

    def get_seller_name(self, obj):
        return resolve_display_name(obj.seller_id)


class ListingWriteSerializer(serializers.Serializer):
    """Validates multipart/JSON listing input before it reaches the service."""
    title = serializers.CharField(max_length=160, required=False)
    description = serializers.CharField(required=False)
    price = serializers.DecimalField(max_digits=14, decimal_places=2, required=False)
    currency = serializers.CharField(max_length=8, required=False)
    category = serializers.CharField(max_length=80, required=False)
    location = serializers.CharField(max_length=200, required=False)
    city = serializers.CharField(max_length=120, required=False, allow_blank=True)
    condition = serializers.CharField(max_length=16, required=False)
    images = serializers.ListField(child=serializers.ImageField(), required=False, max_length=10)


class OfferSerializer(serializers.ModelSerializer):
    buyer_name = serializers.SerializerMethodField()
    listing = serializers.SerializerMethodField()

    class Meta:
        model = Offer
        fields = ["id", "listing", "buyer", "buyer_name", "offer_amount", "message", "status", "created_at", "updated_at"]
        read_only_fields = fields

    def get_buyer_name(self, obj):
        return resolve_display_name(obj.buyer_id)

    def get_listing(self, obj):
        listing = obj.listing
        return {"id": listing.pk, "title": listing.title, "price": str(listing.price), "cover_image": listing.cover_image}


class OfferStatusSerializer(serializers.Serializer):
    status = serializers.CharField(max_length=16)


class RejectSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=240, required=False, allow_blank=True)


class OrderSerializer(serializers.ModelSerializer):
    class Meta:
        model = Order
        fields = [
            "id", "order_number", "user", "items", "total", "currency", "status", "shipping_address",
            "payment_method", "payment_status", "created_at", "updated_at",
        ]
        read_only_fields = fields
