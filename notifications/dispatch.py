"""
Notification dispatcher.

``send_notification`` writes one notification and raises on failure.
``notify`` is its best-effort form for side effects of an action that already
succeeded: failures go to the dead-letter log. ``fan_out`` sends one
notification per recipient with each failure isolated from the others and
returns one ``Delivery`` outcome per recipient.
"""
import logging
from dataclasses import dataclass
from typing import List, Optional

from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone

from common.exceptions import NotFound, ValidationError
from common.models import DeadLetterKind
from common.queries import fetch_ordered
from common.realtime import push_event, user_group
from common.services import clean_text, service_call
from common.side_effects import best_effort, record_dead_letter

from .models import Notification, NotificationType

logger = logging.getLogger(__name__)


@dataclass
class Delivery:
    user_id: int
    ok: bool
    notification_id: Optional[int] = None
    error: str = ""


def _queue_email(notification):
    from .tasks import send_notification_email

    transaction.on_commit(
        lambda: send_notification_email.delay(notif_id=notification.pk, user_id=notification.user_id)
    )


@service_call("Failed to send notification")
def send_notification(user_id, title, message, type=NotificationType.INFO, link="", *, send_email=False, is_broadcast=False):
    if not user_id:
        raise ValidationError("Missing required fields: user_id")
    title = clean_text(title, 200)
    if not title:
        raise ValidationError("Missing required fields: title")
    if type not in NotificationType.values:
        raise ValidationError(f"Unknown notification type: {type}")
    if not get_user_model().objects.filter(pk=user_id).exists():
        raise NotFound(f"User {user_id} not found")
    notification = Notification.objects.create(
        user_id=user_id,
        title=title,
        message=clean_text(message, 4000),
        type=type,
        link=(link or "")[:300],
        is_broadcast=is_broadcast,
    )
    if send_email:
        _queue_email(notification)
    return notification


def notify(user_id, title, message, type=NotificationType.INFO, link="", **kwargs):
    """Best-effort ``send_notification``; returns None when it failed."""
    return best_effort(DeadLetterKind.NOTIFICATION, send_notification, user_id, title, message, type, link, **kwargs)


def fan_out(user_ids, title, message, type=NotificationType.INFO, link="", **kwargs) -> List[Delivery]:
    """Notify every recipient once; one failing write does not stop the rest."""
    outcomes = []
    seen = set()
    for user_id in user_ids:
        if user_id in seen:
            continue
        seen.add(user_id)
        try:
            with transaction.atomic():
                notification = send_notification(user_id, title, message, type, link, **kwargs)
        except Exception as exc:
            logger.warning("fan_out: notification to user %s failed: %s", user_id, exc)
            record_dead_letter(
                DeadLetterKind.NOTIFICATION,
                {"user_id": user_id, "title": title, "message": message, "type": type, "link": link},
                exc,
            )
            outcomes.append(Delivery(user_id=user_id, ok=False, error=str(exc)))
        else:
            outcomes.append(Delivery(user_id=user_id, ok=True, notification_id=notification.pk))
    failed = sum(1 for o in outcomes if not o.ok)
    if failed:
        logger.warning("fan_out: %s of %s notifications failed for %r", failed, len(outcomes), title)
    return outcomes


def push_counts(user_id):
    push_event(user_group(user_id), "counts_event", {"unread": unread_count(user_id)})


# Recipient side


def _get_notification(notification_id, user_id=None):
    qs = Notification.objects.all()
    if user_id is not None:
        qs = qs.filter(user_id=user_id)
    try:
        return qs.get(pk=notification_id)
    except (Notification.DoesNotExist, ValueError, TypeError):
        raise NotFound("Notification not found")


@service_call("Failed to fetch notifications")
def list_for_user(user_id, unread_only=False, limit=None):
    qs = Notification.objects.filter(user_id=user_id)
    if unread_only:
        qs = qs.filter(read=False)
    return fetch_ordered(qs, "-created_at", limit=limit)


def unread_count(user_id) -> int:
    return Notification.objects.filter(user_id=user_id, read=False).count()


@service_call("Failed to mark notification as read")
def mark_read(notification_id, user_id=None):
    notification = _get_notification(notification_id, user_id)
    if not notification.read:
        notification.mark_as_read()
        notification.save(update_fields=["read", "read_at", "updated_at"])
        push_counts(notification.user_id)
    return notification


@service_call("Failed to mark notifications as read")
def mark_all_read(user_id) -> int:
    updated = Notification.objects.filter(user_id=user_id, read=False).update(
        read=True, read_at=timezone.now(), updated_at=timezone.now()
    )
    if updated:
        push_counts(user_id)
    return updated


@service_call("Failed to delete notification")
def delete(notification_id, user_id=None):
    notification = _get_notification(notification_id, user_id)
    owner = notification.user_id
    notification.delete()
    push_counts(owner)


@service_call("Failed to clear notifications")
def clear_all(user_id) -> int:
    """Delete every notification the user has; returns how many were removed."""
    deleted, _ = Notification.objects.filter(user_id=user_id).delete()
    if deleted:
        push_counts(user_id)
    logger.info("cleared %s notification(s) for user %s", deleted, user_id)
    return deleted
