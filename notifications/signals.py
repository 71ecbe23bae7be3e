"""
Push every new notification to the recipient's live listeners.

``post_save`` covers single writes. Broadcast batches are written with
``bulk_create``, which sends no signals, so the bulk sender calls
``push_notifications`` once the batch has committed.
"""
from django.db.models import Count
from django.db.models.signals import post_save
from django.dispatch import receiver

from common.realtime import push_event, user_group

from .models import Notification


def _payload(instance: Notification, unread: int) -> dict:
    return {
        "id": instance.pk,
        "title": instance.title,
        "message": instance.message,
        "type": instance.type,
        "link": instance.link,
        "created_at": instance.created_at.isoformat() if instance.created_at else None,
        "unread": unread,
    }


def push_notifications(notifications):
    """Push a batch of freshly written notifications, one unread-count query for all."""
    notifications = list(notifications)
    if not notifications:
        return
    user_ids = {n.user_id for n in notifications}
    unread = dict(
        Notification.objects.filter(user_id__in=user_ids, read=False)
        .values("user_id")
        .annotate(total=Count("id"))
        .values_list("user_id", "total")
    )
    for notification in notifications:
        push_event(
            user_group(notification.user_id),
            "notification_event",
            _payload(notification, unread.get(notification.user_id, 0)),
        )


@receiver(post_save, sender=Notification)
def broadcast_notification(sender, instance: Notification, created, **kwargs):
    if not created:
        return
    unread = Notification.objects.filter(user_id=instance.user_id, read=False).count()
    push_event(user_group(instance.user_id), "notification_event", _payload(instance, unread))
