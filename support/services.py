"""
Support tickets.

Opening a ticket also opens a chat with the first platform admin, when one
exists, and alerts every admin. Both are follow-ups: the ticket is saved
even if they fail.
"""
import logging

from django.db import transaction

from accounts.services import admin_user_ids
from chat.services import get_or_create_conversation
from common.exceptions import NotFound, ValidationError
from common.models import DeadLetterKind
from common.permissions import is_platform_admin
from common.queries import fetch_ordered
from common.services import clean_text, require_fields, service_call
from common.side_effects import best_effort
from notifications import dispatch
from notifications.models import NotificationType

from .models import SupportReply, SupportTicket, TicketPriority, TicketStatus

logger = logging.getLogger(__name__)

ADMIN_TICKETS_LINK = "/admin/support"
USER_TICKETS_LINK = "/support"


def _get_ticket(ticket_id):
    try:
        return SupportTicket.objects.get(pk=ticket_id)
    except (SupportTicket.DoesNotExist, ValueError, TypeError):
        raise NotFound("Ticket not found")


def _assign_first_admin(ticket, admin_ids):
    admin_id = next((pk for pk in admin_ids if pk != ticket.user_id), None)
    if admin_id is None:
        return None
    conversation, _ = get_or_create_conversation(ticket.user_id, admin_id)
    ticket.conversation = conversation
    ticket.assigned_admin_id = admin_id
    ticket.status = TicketStatus.IN_PROGRESS
    ticket.save(update_fields=["conversation", "assigned_admin", "status", "updated_at"])
    return conversation


@service_call("Failed to create support ticket")
def create(user, data):
    data = dict(data or {})
    data.setdefault("name", user.get_full_name() or user.username)
    data.setdefault("email", user.email)
    require_fields(data, ["name", "email", "subject", "message"])
    priority = data.get("priority") or TicketPriority.NORMAL
    if priority not in TicketPriority.values:
        raise ValidationError(f"Invalid priority. Must be one of: {', '.join(TicketPriority.values)}")
    ticket = SupportTicket.objects.create(
        user=user,
        name=clean_text(data["name"], 120),
        email=clean_text(data["email"], 254),
        subject=clean_text(data["subject"], 200),
        message=clean_text(data["message"], 5000),
        priority=priority,
    )
    logger.info("support ticket %s opened by %s", ticket.pk, user.pk)
    admins = admin_user_ids()
    if best_effort(DeadLetterKind.CHAT, _assign_first_admin, ticket, admins) is None:
        ticket.refresh_from_db()
    dispatch.fan_out(
        [pk for pk in admins if pk != user.pk],
        "New Support Ticket",
        f"{ticket.name} opened a ticket: {ticket.subject}",
        NotificationType.ADMIN,
        ADMIN_TICKETS_LINK,
    )
    dispatch.notify(
        user.pk,
        "Support Ticket Created",
        f'We received your ticket "{ticket.subject}". Our team will get back to you soon.',
        NotificationType.INFO,
        USER_TICKETS_LINK,
    )
    return ticket


@service_call("Failed to reply to ticket")
def reply(ticket_id, sender, text):
    text = clean_text(text, 5000)
    if not text:
        raise ValidationError("Reply cannot be empty")
    ticket = _get_ticket(ticket_id)
    from_admin = is_platform_admin(sender)
    if not from_admin and sender.pk != ticket.user_id:
        raise NotFound("Ticket not found")
    with transaction.atomic():
        entry = SupportReply.objects.create(ticket=ticket, sender=sender, text=text, is_admin=from_admin)
        if from_admin and ticket.status == TicketStatus.OPEN:
            ticket.status = TicketStatus.IN_PROGRESS
            ticket.assigned_admin_id = ticket.assigned_admin_id or sender.pk
            ticket.save(update_fields=["status", "assigned_admin", "updated_at"])
    if from_admin:
        dispatch.notify(
            ticket.user_id,
            "Support Reply",
            f'An admin replied to your ticket "{ticket.subject}".',
            NotificationType.INFO,
            USER_TICKETS_LINK,
        )
    else:
        recipients = [ticket.assigned_admin_id] if ticket.assigned_admin_id else admin_user_ids()
        dispatch.fan_out(
            recipients,
            "Ticket Updated",
            f'{ticket.name} replied on "{ticket.subject}".',
            NotificationType.ADMIN,
            ADMIN_TICKETS_LINK,
        )
    return entry


@service_call("Failed to update ticket")
def update_status(ticket_id, status):
    if status not in TicketStatus.values:
        raise ValidationError(f"Invalid status. Must be one of: {', '.join(TicketStatus.values)}")
    ticket = _get_ticket(ticket_id)
    if ticket.status == status:
        return ticket
    ticket.status = status
    ticket.save(update_fields=["status", "updated_at"])
    logger.info("support ticket %s -> %s", ticket.pk, status)
    if status in (TicketStatus.RESOLVED, TicketStatus.CLOSED):
        dispatch.notify(
            ticket.user_id,
            f"Ticket {ticket.get_status_display()}",
            f'Your ticket "{ticket.subject}" has been marked {ticket.get_status_display().lower()}.',
            NotificationType.SUCCESS,
            USER_TICKETS_LINK,
        )
    return ticket


@service_call("Failed to fetch ticket")
def get_by_id(ticket_id):
    return _get_ticket(ticket_id)


@service_call("Failed to fetch tickets")
def get_by_user(user_id):
    return fetch_ordered(SupportTicket.objects.filter(user_id=user_id), "-created_at")


@service_call("Failed to fetch tickets")
def get_all(status=None):
    qs = SupportTicket.objects.all()
    if status:
        qs = qs.filter(status=status)
    return fetch_ordered(qs, "-created_at")


@service_call("Failed to fetch replies")
def list_replies(ticket_id):
    return fetch_ordered(SupportReply.objects.filter(ticket_id=ticket_id), "created_at")


@service_call("Failed to delete ticket")
def delete(ticket_id):
    ticket = _get_ticket(ticket_id)
    with transaction.atomic():
        replies, _ = SupportReply.objects.filter(ticket=ticket).delete()
        ticket.delete()
    logger.info("support ticket %s deleted with %s replies", ticket_id, replies)
