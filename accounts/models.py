"""
Accounts models: custom User, Profile and ServiceProvider.

- User carries the platform role and the suspension / provider-approval flags
  that gate workflow actions.
- Profile holds optional, user-facing fields and is created by a signal.
- ServiceProvider keeps the ``is_approved`` flag and its legacy twin
  ``approved`` equal; a check constraint rejects any row where they differ.
- Favorite remembers the properties and listings a user saved.
"""
from django.conf import settings
from django.contrib.auth.models import AbstractUser
from django.db import models
from django.db.models import F, Q
from django.utils import timezone

from common.models import TimeStampedModel


class Role(models.TextChoices):
    CUSTOMER = "customer", "Customer"
    PROVIDER = "provider", "Service provider"
    ADMIN = "admin", "Admin"


class ServiceType(models.TextChoices):
    CONSTRUCTION = "construction", "Construction"
    RENOVATION = "renovation", "Renovation"


class User(AbstractUser):
    """Custom user model based on Django's AbstractUser."""
    # Email is unique for reliable contact and notification flows
    email = models.EmailField("email address", unique=True, blank=True)
    role = models.CharField(max_length=16, choices=Role.choices, default=Role.CUSTOMER, db_index=True)
    is_suspended = models.BooleanField(default=False)
    is_provider_approved = models.BooleanField(default=False)
    phone = models.CharField(max_length=32, blank=True)
    email_notifications = models.BooleanField(default=True, help_text="Also send notifications by email")

    class Meta:
        ordering = ["username"]

    def __str__(self) -> str:
        return f"User({self.username})"

    @property
    def is_platform_admin(self) -> bool:
        return self.is_superuser or self.role == Role.ADMIN


class Profile(models.Model):
    """User profile linked 1:1 with the custom User model."""
    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="profile")
    display_name = models.CharField(max_length=120, blank=True)
    bio = models.TextField(blank=True)
    city = models.CharField(max_length=120, blank=True)
    phone = models.CharField(max_length=30, blank=True)
    avatar = models.ImageField(upload_to="avatars/%Y/%m/", blank=True, null=True)
    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["user__username"]

    def __str__(self) -> str:
        return f"Profile({self.user.username})"


class ServiceProvider(TimeStampedModel):
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="provider_profiles")
    service_type = models.CharField(max_length=16, choices=ServiceType.choices, db_index=True)
    business_name = models.CharField(max_length=160)
    description = models.TextField(blank=True)
    phone = models.CharField(max_length=32, blank=True)
    city = models.CharField(max_length=120, blank=True)
    experience_years = models.PositiveIntegerField(default=0)
    is_approved = models.BooleanField(default=False, db_index=True)
    # Legacy twin of is_approved; always written together
    approved = models.BooleanField(default=False)
    rejected_reason = models.TextField(blank=True)
    approved_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(fields=["user", "service_type"], name="uniq_provider_user_service"),
            models.CheckConstraint(condition=Q(is_approved=F("approved")), name="provider_approval_flags_agree"),
        ]

    def __str__(self) -> str:
        return f"{self.business_name} ({self.service_type})"

    @property
    def is_pending(self) -> bool:
        return not self.is_approved and not self.approved and not self.rejected_reason

    def set_approval(self, approved: bool, reason: str = ""):
        self.is_approved = approved
        self.approved = approved
        self.approved_at = timezone.now() if approved else None
        self.rejected_reason = "" if approved else reason

    def save(self, *args, **kwargs):
        self.approved = self.is_approved
        update_fields = kwargs.get("update_fields")
        if update_fields is not None and "is_approved" in update_fields and "approved" not in update_fields:
            kwargs["update_fields"] = [*update_fields, "approved"]
        super().save(*args, **kwargs)


class FavoriteTarget(models.TextChoices):
    PROPERTY = "property", "Property"
    LISTING = "listing", "Marketplace listing"


class Favorite(models.Model):
    """A property or marketplace listing saved by a user."""
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="favorites")
    target_type = models.CharField(max_length=16, choices=FavoriteTarget.choices)
    target_id = models.PositiveBigIntegerField()
    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(fields=["user", "target_type", "target_id"], name="uniq_favorite_user_target"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"Favorite {self.target_type}:{self.target_id} of {self.user_id}"
