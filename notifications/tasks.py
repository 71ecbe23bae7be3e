import logging

from celery import shared_task
from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.mail import send_mail

from .models import BroadcastJob, Notification

logger = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=3, default_retry_delay=60)
def send_notification_email(self, *, notif_id: int, user_id: int):
    """
    Async email delivery for notifications with retries.

    Respects the user's email preference and marks Notification.email_sent on success.
    """
    User = get_user_model()
    try:
        user = User.objects.get(pk=user_id)
        notif = Notification.objects.get(pk=notif_id)
    except (User.DoesNotExist, Notification.DoesNotExist):
        return False

    if not (user.email_notifications and user.email) or notif.email_sent:
        return False

    body = (notif.message or "").strip()
    if notif.link:
        body += f"\n\n{notif.link}"
    try:
        send_mail(
            subject=notif.title,
            message=body,
            from_email=getattr(settings, "DEFAULT_FROM_EMAIL", "no-reply@example.com"),
            recipient_list=[user.email],
            fail_silently=False,
        )
    except Exception as exc:
        logger.warning("send_notification_email: notification %s to %s failed: %s", notif_id, user.email, exc)
        raise self.retry(exc=exc)
    Notification.objects.filter(pk=notif_id).update(email_sent=True)
    return True


@shared_task
def deliver_broadcast(job_id: int):
    """Run one broadcast job. Single attempt: a failed batch stops the job."""
    from .broadcast import run_broadcast

    job = BroadcastJob.objects.get(pk=job_id)
    run_broadcast(job)
    return job.sent
