"""
Chat operations: find-or-create a 1:1 conversation, post and list messages.
"""
import logging

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.db.models import F, Q
from django.utils import timezone

from accounts.display_names import resolve_display_name
from common.exceptions import NotFound, ValidationError
from common.queries import fetch_ordered
from common.realtime import push_event
from common.services import clean_text, service_call
from notifications import dispatch
from notifications.models import NotificationType

from .models import ChatMessage, Conversation

logger = logging.getLogger(__name__)

MAX_MESSAGE_LENGTH = 4000


def conversation_group(conversation_id) -> str:
    return f"chat_{conversation_id}"


def _ordered_pair(user_a, user_b):
    if not user_a or not user_b:
        raise ValidationError("Both user IDs are required")
    a, b = int(user_a), int(user_b)
    if a == b:
        raise ValidationError("Cannot create chat with yourself")
    return (a, b) if a < b else (b, a)


@service_call("Failed to open conversation")
def get_or_create_conversation(user_a, user_b):
    """Return ``(conversation, created)`` for the unordered pair of users."""
    one, two = _ordered_pair(user_a, user_b)
    existing = Conversation.objects.filter(user_one_id=one, user_two_id=two).first()
    if existing:
        return existing, False
    if get_user_model().objects.filter(pk__in=[one, two]).count() != 2:
        raise NotFound("User not found")
    try:
        with transaction.atomic():
            conversation = Conversation.objects.create(user_one_id=one, user_two_id=two)
    except IntegrityError:
        # Another request created the pair first
        return Conversation.objects.get(user_one_id=one, user_two_id=two), False
    logger.info("conversation %s opened between %s and %s", conversation.pk, one, two)
    return conversation, True


def get_conversation(conversation_id, user_id=None):
    try:
        conversation = Conversation.objects.get(pk=conversation_id)
    except (Conversation.DoesNotExist, ValueError, TypeError):
        raise NotFound("Conversation not found")
    if user_id is not None and not conversation.has_participant(user_id):
        raise NotFound("Conversation not found")
    return conversation


@service_call("Failed to send message")
def post_message(conversation_id, sender_id, text):
    text = clean_text(text, MAX_MESSAGE_LENGTH)
    if not text:
        raise ValidationError("Message cannot be empty")
    with transaction.atomic():
        conversation = get_conversation(conversation_id, sender_id)
        message = ChatMessage.objects.create(conversation=conversation, sender_id=sender_id, text=text)
        unread_field = "unread_two" if sender_id == conversation.user_one_id else "unread_one"
        now = timezone.now()
        Conversation.objects.filter(pk=conversation.pk).update(
            last_message=text[:500],
            last_message_at=now,
            updated_at=now,
            **{unread_field: F(unread_field) + 1},
        )
    recipient = conversation.other_participant(sender_id)
    push_event(
        conversation_group(conversation.pk),
        "chat_message_event",
        {
            "id": message.pk,
            "conversation": conversation.pk,
            "sender": sender_id,
            "text": message.text,
            "created_at": message.created_at.isoformat(),
        },
    )
    dispatch.notify(
        recipient,
        "New Message",
        f"{resolve_display_name(sender_id)} sent you a message",
        NotificationType.INFO,
        f"/chat?chatId={conversation.pk}",
    )
    return message


@service_call("Failed to fetch messages")
def list_messages(conversation_id, user_id=None, limit=None):
    conversation = get_conversation(conversation_id, user_id)
    return fetch_ordered(conversation.messages.all(), "created_at", limit=limit)


@service_call("Failed to mark messages as read")
def mark_read(conversation_id, user_id):
    conversation = get_conversation(conversation_id, user_id)
    with transaction.atomic():
        updated = conversation.messages.filter(read=False).exclude(sender_id=user_id).update(read=True)
        unread_field = "unread_one" if user_id == conversation.user_one_id else "unread_two"
        Conversation.objects.filter(pk=conversation.pk).update(**{unread_field: 0})
    return updated


@service_call("Failed to fetch conversations")
def list_for_user(user_id):
    qs = Conversation.objects.filter(Q(user_one_id=user_id) | Q(user_two_id=user_id))
    return fetch_ordered(qs, "-updated_at")
