from django.urls import reverse
from rest_framework.test import APITestCase

from common.test_factories import make_provider, make_user


class AccountsApiTests(APITestCase):
    def test_signup_creates_customer_with_profile(self):
        resp = self.client.post(
            reverse("accounts:signup"),
            {"username": "newbie", "email": "newbie@example.com", "password": "s3cret-pass!"},
            format="json",
        )
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.data["role"], "customer")
        self.assertEqual(resp.data["display_name"], "newbie")

    def test_provider_directory_lists_approved_only(self):
        make_provider("approved_co")
        make_provider("waiting_co", approved=False)
        self.client.force_authenticate(make_user("browser"))
        resp = self.client.get(reverse("accounts:provider-list"))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual([row["business_name"] for row in resp.data], ["approved_co builders"])

    def test_suspended_member_is_blocked(self):
        self.client.force_authenticate(make_user("banned", is_suspended=True))
        resp = self.client.get(reverse("accounts:provider-list"))
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.data["status"], "error")
