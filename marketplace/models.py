"""
Marketplace domain models: MarketplaceListing, Offer and Order.

Second-hand goods listed by users, independent of property listings, with
their own moderation status. Images live in blob storage under
``marketplace/<listing id>/`` and the listing keeps their public URLs.
Orders record a checkout of listings or properties; each item is copied into
the order so later edits to the listing do not change it.
"""
from django.conf import settings
from django.db import models

from common.models import TimeStampedModel


class ListingStatus(models.TextChoices):
    PENDING = "pending", "Pending Approval"
    ACTIVE = "active", "Active"
    SOLD = "sold", "Sold"
    REMOVED = "removed", "Removed"


class ItemCondition(models.TextChoices):
    NEW = "new", "New"
    USED = "used", "Used"
    REFURBISHED = "refurbished", "Refurbished"


class MarketplaceListing(TimeStampedModel):
    """A marketplace item created by a seller and discoverable by buyers."""
    seller = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="marketplace_listings")
    title = models.CharField(max_length=160, db_index=True)
    description = models.TextField()
    price = models.DecimalField(max_digits=14, decimal_places=2)
    currency = models.CharField(max_length=8, default="PKR")
    category = models.CharField(max_length=80, db_index=True)
    location = models.CharField(max_length=200)
    city = models.CharField(max_length=120, blank=True, db_index=True)
    condition = models.CharField(max_length=16, choices=ItemCondition.choices, default=ItemCondition.NEW)
    status = models.CharField(
        max_length=16, choices=ListingStatus.choices, default=ListingStatus.PENDING, db_index=True
    )
    images = models.JSONField(default=list, blank=True)
    cover_image = models.CharField(max_length=500, blank=True)
    views = models.PositiveIntegerField(default=0)
    favorites_count = models.IntegerField(default=0)
    # Moderation fields
    approved_at = models.DateTimeField(null=True, blank=True)
    rejected_reason = models.CharField(max_length=240, blank=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["category", "status"], name="idx_listing_cat_status"),
            models.Index(fields=["seller", "status"], name="idx_listing_seller_status"),
            models.Index(fields=["price"], name="idx_listing_price"),
        ]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"{self.title} ({self.get_status_display()})"


class OfferStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    ACCEPTED = "accepted", "Accepted"
    REJECTED = "rejected", "Rejected"
    WITHDRAWN = "withdrawn", "Withdrawn"


class Offer(TimeStampedModel):
    """A buyer's price offer on a marketplace listing."""
    listing = models.ForeignKey(MarketplaceListing, on_delete=models.CASCADE, related_name="offers")
    buyer = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="marketplace_offers")
    offer_amount = models.DecimalField(max_digits=14, decimal_places=2)
    message = models.TextField(blank=True)
    status = models.CharField(max_length=16, choices=OfferStatus.choices, default=OfferStatus.PENDING, db_index=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["listing", "created_at"], name="idx_offer_listing_created"),
            models.Index(fields=["buyer", "created_at"], name="idx_offer_buyer_created"),
        ]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"Offer #{self.id} on {self.listing_id} ({self.status})"


class OrderStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    PROCESSING = "processing", "Processing"
    COMPLETED = "completed", "Completed"
    CANCELLED = "cancelled", "Cancelled"


class PaymentStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    PAID = "paid", "Paid"
    FAILED = "failed", "Failed"


class Order(TimeStampedModel):
    """A checkout of one or more items; ``items`` is a snapshot taken at order time."""
    order_number = models.CharField(max_length=40, unique=True)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="orders")
    items = models.JSONField(default=list)
    total = models.DecimalField(max_digits=14, decimal_places=2)
    currency = models.CharField(max_length=8, default="PKR")
    status = models.CharField(max_length=16, choices=OrderStatus.choices, default=OrderStatus.PENDING, db_index=True)
    shipping_address = models.TextField(blank=True)
    payment_method = models.CharField(max_length=40, blank=True)
    payment_status = models.CharField(max_length=16, choices=PaymentStatus.choices, default=PaymentStatus.PENDING)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "created_at"], name="idx_order_user_created"),
        ]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"Order {self.order_number} ({self.get_status_display()})"
