from django.urls import reverse
from rest_framework.test import APITestCase

from common.test_factories import make_user
from notifications import dispatch


class NotificationApiTests(APITestCase):
    def setUp(self):
        self.user = make_user("reader")
        self.client.force_authenticate(self.user)

    def test_list_returns_rows_and_unread_count(self):
        dispatch.send_notification(self.user.pk, "One", "first")
        dispatch.send_notification(self.user.pk, "Two", "second")
        dispatch.send_notification(make_user("other").pk, "Not mine", "")
        resp = self.client.get(reverse("notifications:notification-list"))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["unread"], 2)
        self.assertEqual({row["title"] for row in resp.data["results"]}, {"One", "Two"})

    def test_read_all(self):
        dispatch.send_notification(self.user.pk, "One", "")
        resp = self.client.post(reverse("notifications:notification-read-all"))
        self.assertEqual(resp.data["updated"], 1)
        resp = self.client.get(reverse("notifications:notification-unread-count"))
        self.assertEqual(resp.data["unread"], 0)

    def test_other_users_notification_is_not_found(self):
        n = dispatch.send_notification(make_user("other").pk, "Private", "")
        resp = self.client.post(reverse("notifications:notification-read", args=[n.pk]))
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.data["code"], "not_found")

    def test_clear_all(self):
        dispatch.send_notification(self.user.pk, "One", "")
        dispatch.send_notification(self.user.pk, "Two", "")
        resp = self.client.post(reverse("notifications:notification-clear-all"))
        self.assertEqual(resp.data["deleted"], 2)
        self.assertEqual(self.client.get(reverse("notifications:notification-list")).data["results"], [])
