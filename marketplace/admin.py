from django.contrib import admin

from .models import MarketplaceListing, Offer, Order


class OfferInline(admin.TabularInline):
    model = Offer
    extra = 0
    raw_id_fields = ("buyer",)
    readonly_fields = ("created_at",)


@admin.register(MarketplaceListing)
class MarketplaceListingAdmin(admin.ModelAdmin):
    list_display = ("title", "seller", "category", "price", "status", "views", "created_at")
    list_filter = ("status", "category", "condition")
    search_fields = ("title", "description", "seller__username")
    raw_id_fields = ("seller",)
    inlines = [OfferInline]


@admin.register(Offer)
class OfferAdmin(admin.ModelAdmin):
    list_display = ("id", "listing", "buyer", "offer_amount", "status", "created_at")
    list_filter = ("status",)
    raw_id_fields = ("listing", "buyer")


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("order_number", "user", "total", "currency", "status", "payment_status", "created_at")
    list_filter = ("status", "payment_status")
    search_fields = ("order_number", "user__username")
    raw_id_fields = ("user",)
