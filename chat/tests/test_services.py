from django.test import TestCase

from chat import services
from chat.models import Conversation
from common.exceptions import NotFound, ValidationError
from common.test_factories import make_user
from notifications.models import Notification


class ConversationTests(TestCase):
    def setUp(self):
        self.alice = make_user("alice")
        self.bob = make_user("bob")

    def test_pair_is_unordered_and_unique(self):
        first, created = services.get_or_create_conversation(self.bob.pk, self.alice.pk)
        again, created_again = services.get_or_create_conversation(self.alice.pk, self.bob.pk)
        self.assertTrue(created)
        self.assertFalse(created_again)
        self.assertEqual(first.pk, again.pk)
        self.assertLess(first.user_one_id, first.user_two_id)
        self.assertEqual(Conversation.objects.count(), 1)

    def test_cannot_chat_with_yourself(self):
        with self.assertRaises(ValidationError):
            services.get_or_create_conversation(self.alice.pk, self.alice.pk)

    def test_message_updates_preview_unread_and_notifies(self):
        conv, _ = services.get_or_create_conversation(self.alice.pk, self.bob.pk)
        services.post_message(conv.pk, self.alice.pk, "  Is the flat still available?  ")
        conv.refresh_from_db()
        self.assertEqual(conv.last_message, "Is the flat still available?")
        self.assertEqual(conv.unread_for(self.bob.pk), 1)
        self.assertEqual(conv.unread_for(self.alice.pk), 0)
        self.assertTrue(Notification.objects.filter(user=self.bob, title="New Message").exists())

        self.assertEqual(services.mark_read(conv.pk, self.bob.pk), 1)
        conv.refresh_from_db()
        self.assertEqual(conv.unread_for(self.bob.pk), 0)

    def test_outsiders_cannot_read_or_post(self):
        conv, _ = services.get_or_create_conversation(self.alice.pk, self.bob.pk)
        eve = make_user("eve")
        with self.assertRaises(NotFound):
            services.list_messages(conv.pk, eve.pk)
        with self.assertRaises(NotFound):
            services.post_message(conv.pk, eve.pk, "hi")

    def test_empty_message_rejected(self):
        conv, _ = services.get_or_create_conversation(self.alice.pk, self.bob.pk)
        with self.assertRaises(ValidationError):
            services.post_message(conv.pk, self.alice.pk, "   ")
