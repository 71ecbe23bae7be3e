from django.contrib import admin

from .models import BuySellRequest, Property, RentalRequest


@admin.register(Property)
class PropertyAdmin(admin.ModelAdmin):
    list_display = ("title", "owner", "listing_type", "price", "city", "status", "views", "created_at")
    list_filter = ("status", "listing_type", "city")
    search_fields = ("title", "address", "city", "owner__username")
    raw_id_fields = ("owner",)


@admin.register(RentalRequest)
class RentalRequestAdmin(admin.ModelAdmin):
    list_display = ("id", "property", "user", "landlord", "status", "created_at")
    list_filter = ("status",)
    raw_id_fields = ("user", "property", "landlord")


@admin.register(BuySellRequest)
class BuySellRequestAdmin(admin.ModelAdmin):
    list_display = ("id", "property", "user", "owner", "offer_amount", "status", "created_at")
    list_filter = ("status",)
    raw_id_fields = ("user", "property", "owner")
