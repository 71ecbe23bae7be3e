"""
Shared models: the timestamp base used by every domain model and the
dead-letter log that records best-effort side effects which failed.

``RequestUpdate`` keeps the status history of every request-like record.
"""
from django.conf import settings
from django.db import models
from django.utils import timezone


class TimeStampedModel(models.Model):
    """Abstract base model that adds created_at and updated_at timestamps."""
    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class DeadLetterKind(models.TextChoices):
    NOTIFICATION = "notification", "Notification"
    CHAT = "chat", "Chat"
    EMAIL = "email", "Email"
    REALTIME = "realtime", "Realtime push"
    PAYMENT_SYNC = "payment_sync", "Payment status sync"


class DeadLetter(models.Model):
    """A side effect that was attempted once and failed.

    The primary action that triggered it already succeeded; rows here are for
    operators to inspect or replay by hand.
    """
    kind = models.CharField(max_length=32, choices=DeadLetterKind.choices, db_index=True)
    payload = models.JSONField(default=dict, blank=True)
    error = models.TextField(blank=True)
    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["kind", "created_at"], name="idx_deadletter_kind_created"),
        ]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"DeadLetter #{self.id} ({self.kind})"


class RequestUpdate(models.Model):
    """One entry in the status history of a rental, purchase or service request.

    ``kind`` is the request model's name, so one table serves every request type.
    """
    kind = models.CharField(max_length=40)
    object_id = models.PositiveBigIntegerField()
    status = models.CharField(max_length=32)
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )
    note = models.TextField(blank=True)
    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["kind", "object_id", "created_at"], name="idx_requestupdate_object"),
        ]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"{self.kind} #{self.object_id} -> {self.status}"
