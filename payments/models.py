"""
Payment records against requests and properties.

A transaction names its target by type and id. Settling one as ``success``
advances the related request (see ``payments.services``).
"""
from django.conf import settings
from django.db import models

from common.models import TimeStampedModel


class TargetType(models.TextChoices):
    CONSTRUCTION = "construction", "Construction request"
    RENOVATION = "renovation", "Renovation request"
    RENTAL = "rental", "Rental request"
    BUY_SELL = "buySell", "Buy/sell request"
    PROPERTY = "property", "Property"


class TransactionStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    SUCCESS = "success", "Success"
    FAILED = "failed", "Failed"


SETTLED_STATUSES = (TransactionStatus.SUCCESS, TransactionStatus.FAILED)


class Transaction(TimeStampedModel):
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="transactions")
    target_type = models.CharField(max_length=16, choices=TargetType.choices)
    target_id = models.PositiveBigIntegerField()
    amount = models.DecimalField(max_digits=14, decimal_places=2)
    currency = models.CharField(max_length=8, default="PKR")
    status = models.CharField(
        max_length=16, choices=TransactionStatus.choices, default=TransactionStatus.PENDING, db_index=True
    )
    reference = models.CharField(max_length=120, blank=True)
    settled_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "created_at"], name="idx_tx_user_created"),
            models.Index(fields=["target_type", "target_id"], name="idx_tx_target"),
        ]
        constraints = [
            models.CheckConstraint(condition=models.Q(amount__gt=0), name="ck_tx_amount_positive"),
        ]

    @property
    def is_settled(self) -> bool:
        return self.status in SETTLED_STATUSES

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"Txn #{self.id} {self.target_type}:{self.target_id} ({self.get_status_display()})"
