from unittest import mock

from django.core import mail
from django.test import TestCase

from common.exceptions import NotFound, ValidationError
from common.models import DeadLetter
from common.test_factories import make_user
from notifications import dispatch
from notifications.models import Notification, NotificationType


class SendNotificationTests(TestCase):
    def setUp(self):
        self.user = make_user("reader")

    def test_creates_unread_notification(self):
        n = dispatch.send_notification(self.user.pk, "Welcome", "Hello there", NotificationType.INFO, "/home")
        self.assertFalse(n.read)
        self.assertEqual(dispatch.unread_count(self.user.pk), 1)

    def test_requires_title_and_known_user(self):
        with self.assertRaises(ValidationError):
            dispatch.send_notification(self.user.pk, "  ", "body")
        with self.assertRaises(NotFound):
            dispatch.send_notification(424242, "Hi", "body")

    def test_notify_swallows_and_dead_letters(self):
        self.assertIsNone(dispatch.notify(424242, "Hi", "body"))
        self.assertEqual(DeadLetter.objects.count(), 1)

    def test_email_is_sent_after_commit(self):
        with self.captureOnCommitCallbacks(execute=True):
            n = dispatch.send_notification(self.user.pk, "Receipt", "Paid", send_email=True)
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ["reader@example.com"])
        n.refresh_from_db()
        self.assertTrue(n.email_sent)

    def test_mark_read_and_mark_all_read(self):
        first = dispatch.send_notification(self.user.pk, "One", "")
        dispatch.send_notification(self.user.pk, "Two", "")
        dispatch.mark_read(first.pk, user_id=self.user.pk)
        self.assertEqual(dispatch.unread_count(self.user.pk), 1)
        self.assertEqual(dispatch.mark_all_read(self.user.pk), 1)
        self.assertEqual(dispatch.unread_count(self.user.pk), 0)

    def test_clear_all_only_removes_own_notifications(self):
        other = make_user("other")
        dispatch.send_notification(self.user.pk, "One", "")
        dispatch.send_notification(self.user.pk, "Two", "")
        kept = dispatch.send_notification(other.pk, "Theirs", "")
        with mock.patch("notifications.dispatch.push_event") as push:
            self.assertEqual(dispatch.clear_all(self.user.pk), 2)
        push.assert_called_once()
        self.assertEqual(push.call_args.args[2], {"unread": 0})
        self.assertFalse(Notification.objects.filter(user=self.user).exists())
        self.assertTrue(Notification.objects.filter(pk=kept.pk).exists())
        self.assertEqual(dispatch.clear_all(self.user.pk), 0)

    def test_cannot_touch_someone_elses_notification(self):
        other = make_user("other")
        n = dispatch.send_notification(other.pk, "Private", "")
        with self.assertRaises(NotFound):
            dispatch.mark_read(n.pk, user_id=self.user.pk)


class FanOutTests(TestCase):
    def test_one_failure_does_not_stop_the_rest(self):
        users = [make_user(f"p{i}") for i in range(3)]
        real = dispatch.send_notification

        def flaky(user_id, *args, **kwargs):
            if user_id == users[1].pk:
                raise RuntimeError("write rejected")
            return real(user_id, *args, **kwargs)

        with mock.patch("notifications.dispatch.send_notification", side_effect=flaky):
            outcomes = dispatch.fan_out([u.pk for u in users], "New Project Request", "body")

        self.assertEqual([o.ok for o in outcomes], [True, False, True])
        self.assertEqual(Notification.objects.count(), 2)
        self.assertEqual(DeadLetter.objects.count(), 1)

    def test_duplicate_recipients_are_notified_once(self):
        user = make_user("dup")
        dispatch.fan_out([user.pk, user.pk], "Hello", "")
        self.assertEqual(Notification.objects.filter(user=user).count(), 1)
