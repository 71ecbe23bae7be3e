"""
Property listings and the rental / buy-sell requests made against them.
"""
from django.conf import settings
from django.db import models

from common.models import TimeStampedModel
from common.workflow import StatusWorkflow


class ListingType(models.TextChoices):
    RENT = "rent", "For rent"
    SALE = "sale", "For sale"


class PropertyStatus(models.TextChoices):
    PENDING = "pending", "Pending review"
    PUBLISHED = "published", "Published"
    SUSPENDED = "suspended", "Suspended"


class Property(TimeStampedModel):
    owner = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="properties")
    title = models.CharField(max_length=200)
    description = models.TextField()
    listing_type = models.CharField(max_length=8, choices=ListingType.choices, db_index=True)
    price = models.DecimalField(max_digits=14, decimal_places=2)
    currency = models.CharField(max_length=8, default="PKR")
    address = models.CharField(max_length=300)
    city = models.CharField(max_length=120, blank=True, db_index=True)
    bedrooms = models.PositiveSmallIntegerField(default=0)
    bathrooms = models.PositiveSmallIntegerField(default=0)
    area_sqft = models.PositiveIntegerField(null=True, blank=True)
    furnished = models.BooleanField(default=False)
    parking = models.BooleanField(default=False)
    status = models.CharField(max_length=16, choices=PropertyStatus.choices, default=PropertyStatus.PUBLISHED, db_index=True)
    views = models.PositiveIntegerField(default=0)
    favorites_count = models.IntegerField(default=0)
    photos = models.JSONField(default=list, blank=True)
    cover_image = models.CharField(max_length=500, blank=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name_plural = "properties"
        indexes = [
            models.Index(fields=["status", "listing_type", "created_at"], name="idx_property_browse"),
        ]

    def __str__(self) -> str:
        return self.title


class RentalStatus(models.TextChoices):
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    ACCEPTED = "Accepted"
    REJECTED = "Rejected"
    PAID = "Paid"
    COMPLETED = "Completed"


class BuySellStatus(models.TextChoices):
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    ACCEPTED = "Accepted"
    REJECTED = "Rejected"
    PAID = "Paid"
    CANCELLED = "Cancelled"
    COMPLETED = "Completed"


RENTAL_WORKFLOW = StatusWorkflow(
    "rental request",
    {
        RentalStatus.PENDING: [RentalStatus.ACCEPTED, RentalStatus.REJECTED, RentalStatus.CONFIRMED],
        RentalStatus.CONFIRMED: [RentalStatus.ACCEPTED, RentalStatus.REJECTED],
        RentalStatus.ACCEPTED: [RentalStatus.PAID, RentalStatus.COMPLETED],
        RentalStatus.PAID: [RentalStatus.COMPLETED],
    },
    aliases={"Approved": RentalStatus.ACCEPTED},
)

BUY_SELL_WORKFLOW = StatusWorkflow(
    "purchase offer",
    {
        BuySellStatus.PENDING: [BuySellStatus.ACCEPTED, BuySellStatus.REJECTED, BuySellStatus.CONFIRMED],
        BuySellStatus.CONFIRMED: [BuySellStatus.ACCEPTED, BuySellStatus.REJECTED],
        BuySellStatus.ACCEPTED: [BuySellStatus.PAID, BuySellStatus.CANCELLED, BuySellStatus.COMPLETED],
        BuySellStatus.PAID: [BuySellStatus.COMPLETED],
    },
    aliases={"Approved": BuySellStatus.ACCEPTED},
)


class RentalRequest(TimeStampedModel):
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="rental_requests")
    property = models.ForeignKey(Property, on_delete=models.CASCADE, related_name="rental_requests")
    landlord = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="received_rental_requests")
    duration_months = models.PositiveSmallIntegerField(default=12)
    budget = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)
    move_in_date = models.DateField(null=True, blank=True)
    message = models.TextField(blank=True)
    status = models.CharField(max_length=16, choices=RentalStatus.choices, default=RentalStatus.PENDING, db_index=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:  # pragma: no cover
        return f"Rental request #{self.id} ({self.status})"


class BuySellRequest(TimeStampedModel):
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="buy_sell_requests")
    property = models.ForeignKey(Property, on_delete=models.CASCADE, related_name="buy_sell_requests")
    owner = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="received_buy_sell_requests")
    offer_amount = models.DecimalField(max_digits=14, decimal_places=2)
    message = models.TextField(blank=True)
    status = models.CharField(max_length=16, choices=BuySellStatus.choices, default=BuySellStatus.PENDING, db_index=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:  # pragma: no cover
        return f"Purchase offer #{self.id} ({self.status})"
