"""
Admin bulk sender.

A broadcast resolves its audience once, stores the recipient ids on a
``BroadcastJob`` and writes notifications in atomic batches of at most
``NOTIFICATION_BATCH_SIZE``. Audiences above
``BROADCAST_CONFIRMATION_THRESHOLD`` stop before the first write until an
operator confirms. A failing batch stops the job; batches already committed
stay committed.
"""
import logging
from functools import partial

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone

from common.exceptions import ConfirmationRequired, NotFound, ServiceError, ValidationError
from common.realtime import push_event
from common.services import clean_text, service_call

from .models import Audience, BroadcastJob, BroadcastStatus, Notification, NotificationType
from .signals import push_notifications

logger = logging.getLogger(__name__)

PROGRESS_GROUP = "broadcasts"


def batch_size() -> int:
    return int(getattr(settings, "NOTIFICATION_BATCH_SIZE", 500))


def confirmation_threshold() -> int:
    return int(getattr(settings, "BROADCAST_CONFIRMATION_THRESHOLD", 500))


def resolve_recipients(audience, single_uid=None):
    """Recipient user ids for an audience selector, in a stable order."""
    User = get_user_model()
    if audience == Audience.ALL_USERS:
        return list(User.objects.filter(is_active=True).order_by("pk").values_list("pk", flat=True))
    if audience == Audience.ALL_PROVIDERS:
        from accounts.services import approved_provider_user_ids

        return approved_provider_user_ids()
    if audience == Audience.SINGLE_UID:
        if not single_uid:
            raise ValidationError("A user id is required for a single-user notification")
        try:
            return [User.objects.only("pk").get(pk=single_uid).pk]
        except (User.DoesNotExist, ValueError, TypeError):
            raise NotFound(f"User {single_uid} not found")
    raise ValidationError(f"Unknown audience: {audience}")


def _publish(job):
    push_event(PROGRESS_GROUP, "broadcast_progress", job.progress)


def _enqueue(job):
    from .tasks import deliver_broadcast

    deliver_broadcast.delay(job.pk)


@service_call("Failed to send notification")
def start_broadcast(actor, title, message, audience, single_uid=None, confirmed=False, *, type=NotificationType.ADMIN, link=""):
    title = clean_text(title, 200)
    message = clean_text(message, 4000)
    if not title or not message:
        raise ValidationError("Title and message are required")
    recipients = resolve_recipients(audience, single_uid)
    if not recipients:
        raise ValidationError("No recipients found for this audience")

    job = BroadcastJob.objects.create(
        created_by=actor,
        title=title,
        message=message,
        type=type,
        link=link or "",
        audience=audience,
        single_uid=single_uid if audience == Audience.SINGLE_UID else None,
        recipient_ids=recipients,
        total=len(recipients),
        status=BroadcastStatus.QUEUED,
    )
    if job.total > confirmation_threshold() and not confirmed:
        job.status = BroadcastStatus.AWAITING_CONFIRMATION
        job.save(update_fields=["status", "updated_at"])
        logger.info("broadcast %s: %s recipients, waiting for confirmation", job.pk, job.total)
        _publish(job)
        raise ConfirmationRequired(
            f"This will notify {job.total} users. Please confirm to continue.",
            job_id=job.pk,
            total=job.total,
        )
    if confirmed:
        job.confirmed_at = timezone.now()
        job.save(update_fields=["confirmed_at", "updated_at"])
    _enqueue(job)
    job.refresh_from_db()
    return job


@service_call("Failed to send notification")
def confirm_broadcast(job_id, actor=None):
    try:
        job = BroadcastJob.objects.get(pk=job_id)
    except (BroadcastJob.DoesNotExist, ValueError, TypeError):
        raise NotFound("Broadcast not found")
    if job.status != BroadcastStatus.AWAITING_CONFIRMATION:
        raise ValidationError(f"Broadcast is {job.get_status_display().lower()} and cannot be confirmed")
    job.status = BroadcastStatus.QUEUED
    job.confirmed_at = timezone.now()
    job.save(update_fields=["status", "confirmed_at", "updated_at"])
    logger.info("broadcast %s confirmed by %s", job.pk, getattr(actor, "pk", None))
    _enqueue(job)
    job.refresh_from_db()
    return job


def get_progress(job_id) -> dict:
    try:
        return BroadcastJob.objects.get(pk=job_id).progress
    except (BroadcastJob.DoesNotExist, ValueError, TypeError):
        raise NotFound("Broadcast not found")


def _write_batch(job, recipient_ids):
    created = Notification.objects.bulk_create(
        [
            Notification(
                user_id=user_id,
                title=job.title,
                message=job.message,
                type=job.type,
                link=job.link,
                is_broadcast=True,
            )
            for user_id in recipient_ids
        ]
    )
    # bulk_create sends no post_save; push once the batch is committed
    transaction.on_commit(partial(push_notifications, created))


def run_broadcast(job, on_progress=None):
    """Write the job's notifications batch by batch, resuming after ``sent``."""
    if job.status not in (BroadcastStatus.QUEUED, BroadcastStatus.RUNNING):
        raise ValidationError(f"Broadcast is {job.get_status_display().lower()} and cannot run")
    job.status = BroadcastStatus.RUNNING
    job.save(update_fields=["status", "updated_at"])
    size = batch_size()
    pending = list(job.recipient_ids)[job.sent:]

    for start in range(0, len(pending), size):
        chunk = pending[start:start + size]
        try:
            with transaction.atomic():
                _write_batch(job, chunk)
                job.sent += len(chunk)
                job.batches += 1
                job.save(update_fields=["sent", "batches", "updated_at"])
        except Exception as exc:
            job.refresh_from_db(fields=["sent", "batches"])
            job.status = BroadcastStatus.FAILED
            job.error = str(exc) or "Batch write failed"
            job.finished_at = timezone.now()
            job.save(update_fields=["status", "error", "finished_at", "updated_at"])
            logger.exception("broadcast %s: batch %s failed after %s/%s", job.pk, job.batches + 1, job.sent, job.total)
            _publish(job)
            raise ServiceError(f"Broadcast stopped after {job.sent} of {job.total} notifications: {job.error}") from exc
        logger.info("broadcast %s: batch %s committed, %s/%s", job.pk, job.batches, job.sent, job.total)
        if on_progress is not None:
            on_progress(job.sent, job.total)
        _publish(job)

    job.status = BroadcastStatus.COMPLETED
    job.finished_at = timezone.now()
    job.save(update_fields=["status", "finished_at", "updated_at"])
    _publish(job)
    return job
