"""
Account operations: provider registration and the moderation actions that
change roles, approval and suspension flags.
"""
import logging

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Q

from common.exceptions import NotFound, ValidationError
from common.queries import fetch_ordered
from common.services import clean_text, service_call
from notifications import dispatch
from notifications.models import NotificationType

from .models import Role, ServiceProvider, ServiceType

logger = logging.getLogger(__name__)

User = get_user_model()


def _get_user(user_id):
    try:
        return User.objects.get(pk=user_id)
    except (User.DoesNotExist, ValueError, TypeError):
        raise NotFound("User not found")


def _get_provider(provider_id):
    try:
        return ServiceProvider.objects.select_related("user").get(pk=provider_id)
    except (ServiceProvider.DoesNotExist, ValueError, TypeError):
        raise NotFound("Service provider not found")


@service_call("Failed to register provider")
def register_provider(user, service_type, business_name, **details):
    if service_type not in ServiceType.values:
        raise ValidationError(f"Unknown service type: {service_type}")
    business_name = clean_text(business_name, 160)
    if not business_name:
        raise ValidationError("Missing required fields: business_name")
    if ServiceProvider.objects.filter(user=user, service_type=service_type).exists():
        raise ValidationError(f"You are already registered as a {service_type} provider")
    with transaction.atomic():
        provider = ServiceProvider.objects.create(
            user=user,
            service_type=service_type,
            business_name=business_name,
            description=clean_text(details.get("description"), 4000),
            phone=clean_text(details.get("phone"), 32),
            city=clean_text(details.get("city"), 120),
            experience_years=int(details.get("experience_years") or 0),
        )
        if user.role == Role.CUSTOMER:
            user.role = Role.PROVIDER
            user.save(update_fields=["role"])
    logger.info("provider %s registered for user %s (%s)", provider.pk, user.pk, service_type)
    return provider


@service_call("Failed to fetch providers")
def list_providers(service_type=None, approved=None):
    qs = ServiceProvider.objects.select_related("user")
    if service_type:
        qs = qs.filter(service_type=service_type)
    if approved is not None:
        qs = qs.filter(is_approved=approved)
    return fetch_ordered(qs, "-created_at")


def approved_provider_user_ids(service_type=None):
    """User ids of approved providers, de-duplicated, in first-approved order."""
    qs = ServiceProvider.objects.filter(is_approved=True)
    if service_type:
        qs = qs.filter(service_type=service_type)
    seen = []
    for user_id in qs.order_by("approved_at", "pk").values_list("user_id", flat=True):
        if user_id not in seen:
            seen.append(user_id)
    return seen


@service_call("Failed to approve provider")
def approve_provider(provider_id):
    with transaction.atomic():
        provider = _get_provider(provider_id)
        provider.set_approval(True)
        provider.save(update_fields=["is_approved", "approved", "approved_at", "rejected_reason", "updated_at"])
        User.objects.filter(pk=provider.user_id).update(is_provider_approved=True, role=Role.PROVIDER)
    logger.info("provider %s approved", provider.pk)
    dispatch.notify(
        provider.user_id,
        "Provider application approved",
        f"Your {provider.get_service_type_display().lower()} provider profile \"{provider.business_name}\" has been approved.",
        NotificationType.SUCCESS,
        "/provider/dashboard",
    )
    return provider


@service_call("Failed to reject provider")
def reject_provider(provider_id, reason=""):
    reason = clean_text(reason, 1000) or "Your application did not meet our requirements"
    with transaction.atomic():
        provider = _get_provider(provider_id)
        provider.set_approval(False, reason)
        provider.save(update_fields=["is_approved", "approved", "approved_at", "rejected_reason", "updated_at"])
        still_approved = ServiceProvider.objects.filter(user_id=provider.user_id, is_approved=True).exists()
        User.objects.filter(pk=provider.user_id).update(is_provider_approved=still_approved)
    logger.info("provider %s rejected", provider.pk)
    dispatch.notify(
        provider.user_id,
        "Provider application rejected",
        f"Your provider profile \"{provider.business_name}\" was rejected: {reason}",
        NotificationType.ERROR,
        "/provider/register",
    )
    return provider


@service_call("Failed to update user")
def set_suspended(user_id, suspended: bool):
    user = _get_user(user_id)
    if user.is_superuser and suspended:
        raise ValidationError("Superusers cannot be suspended")
    user.is_suspended = bool(suspended)
    user.save(update_fields=["is_suspended"])
    logger.info("user %s suspended=%s", user.pk, user.is_suspended)
    if suspended:
        dispatch.notify(
            user.pk,
            "Account suspended",
            "Your account has been suspended. Contact support for details.",
            NotificationType.WARNING,
            "/support",
        )
    return user


@service_call("Failed to update user")
def set_role(user_id, role):
    if role not in Role.values:
        raise ValidationError(f"Unknown role: {role}")
    user = _get_user(user_id)
    user.role = role
    user.save(update_fields=["role"])
    logger.info("user %s role=%s", user.pk, role)
    return user


def admin_user_ids():
    """Ids of active platform admins (role admin or superuser), oldest first."""
    qs = User.objects.filter(is_active=True).filter(Q(role=Role.ADMIN) | Q(is_superuser=True))
    return list(qs.order_by("pk").values_list("pk", flat=True))
