"""
One-to-one conversations and their messages.

A conversation's participants are stored ordered (``user_one`` has the lower
id) so each unordered pair maps to exactly one row.
"""
from django.conf import settings
from django.db import models
from django.db.models import F, Q

from common.models import TimeStampedModel


class Conversation(TimeStampedModel):
    user_one = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="+")
    user_two = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="+")
    last_message = models.TextField(blank=True)
    last_message_at = models.DateTimeField(null=True, blank=True, db_index=True)
    unread_one = models.PositiveIntegerField(default=0)
    unread_two = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["-updated_at"]
        constraints = [
            models.UniqueConstraint(fields=["user_one", "user_two"], name="uniq_conversation_pair"),
            models.CheckConstraint(condition=Q(user_one__lt=F("user_two")), name="conversation_pair_ordered"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"Conversation #{self.id} ({self.user_one_id}, {self.user_two_id})"

    @property
    def participant_ids(self):
        return (self.user_one_id, self.user_two_id)

    def has_participant(self, user_id) -> bool:
        return user_id in self.participant_ids

    def other_participant(self, user_id):
        return self.user_two_id if user_id == self.user_one_id else self.user_one_id

    def unread_for(self, user_id) -> int:
        if user_id == self.user_one_id:
            return self.unread_one
        if user_id == self.user_two_id:
            return self.unread_two
        return 0


class ChatMessage(TimeStampedModel):
    conversation = models.ForeignKey(Conversation, on_delete=models.CASCADE, related_name="messages")
    sender = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="chat_messages")
    text = models.TextField()
    read = models.BooleanField(default=False)

    class Meta:
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["conversation", "created_at"], name="idx_chatmsg_conv_created"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"Message #{self.id} in {self.conversation_id}"
