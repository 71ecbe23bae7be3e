"""
In-app notifications and the bulk-send jobs that fan them out.
"""
from django.conf import settings
from django.db import models
from django.utils import timezone

from common.models import TimeStampedModel


class NotificationType(models.TextChoices):
    SERVICE_REQUEST = "service-request", "Service request"
    ADMIN = "admin", "Admin"
    SYSTEM = "system", "System"
    STATUS_UPDATE = "status-update", "Status update"
    INFO = "info", "Info"
    SUCCESS = "success", "Success"
    WARNING = "warning", "Warning"
    ERROR = "error", "Error"


class Notification(TimeStampedModel):
    """A message addressed to one user, read later by the notification UI."""
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="notifications")
    type = models.CharField(max_length=32, choices=NotificationType.choices, default=NotificationType.INFO, db_index=True)
    title = models.CharField(max_length=200)
    message = models.TextField(blank=True)
    link = models.CharField(max_length=300, blank=True)
    read = models.BooleanField(default=False, db_index=True)
    read_at = models.DateTimeField(null=True, blank=True)
    is_broadcast = models.BooleanField(default=False)
    email_sent = models.BooleanField(default=False)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "read"], name="idx_notification_user_read"),
            models.Index(fields=["user", "created_at"], name="idx_notification_user_created"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"Notif #{self.id} to {self.user_id}: {self.title}"

    def mark_as_read(self):
        self.read = True
        self.read_at = timezone.now()


class Audience(models.TextChoices):
    ALL_USERS = "all-users", "All users"
    ALL_PROVIDERS = "all-providers", "All approved providers"
    SINGLE_UID = "single-uid", "Single user"


class BroadcastStatus(models.TextChoices):
    AWAITING_CONFIRMATION = "awaiting_confirmation", "Awaiting confirmation"
    QUEUED = "queued", "Queued"
    RUNNING = "running", "Running"
    COMPLETED = "completed", "Completed"
    FAILED = "failed", "Failed"


class BroadcastJob(TimeStampedModel):
    """One admin bulk send: the resolved recipients and the batch progress."""
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="broadcast_jobs"
    )
    title = models.CharField(max_length=200)
    message = models.TextField()
    type = models.CharField(max_length=32, choices=NotificationType.choices, default=NotificationType.ADMIN)
    link = models.CharField(max_length=300, blank=True)
    audience = models.CharField(max_length=20, choices=Audience.choices)
    single_uid = models.BigIntegerField(null=True, blank=True)
    recipient_ids = models.JSONField(default=list, blank=True)
    total = models.PositiveIntegerField(default=0)
    sent = models.PositiveIntegerField(default=0)
    batches = models.PositiveIntegerField(default=0)
    status = models.CharField(max_length=24, choices=BroadcastStatus.choices, default=BroadcastStatus.QUEUED, db_index=True)
    error = models.TextField(blank=True)
    confirmed_at = models.DateTimeField(null=True, blank=True)
    finished_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:  # pragma: no cover
        return f"Broadcast #{self.id} {self.sent}/{self.total} ({self.status})"

    @property
    def progress(self) -> dict:
        return {
            "job_id": self.pk,
            "sent": self.sent,
            "total": self.total,
            "batches": self.batches,
            "status": self.status,
            "error": self.error,
        }
