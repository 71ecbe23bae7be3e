from django.urls import reverse
from rest_framework.test import APITestCase

from common.test_factories import make_admin, make_user
from payments.models import TransactionStatus


class TransactionApiTests(APITestCase):
    def test_member_records_payment_but_only_admin_settles(self):
        payer = make_user("payer")
        self.client.force_authenticate(payer)
        resp = self.client.post(
            reverse("payments:transaction-list"),
            {"target_type": "property", "target_id": 3, "amount": "2500"},
            format="json",
        )
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.data["status"], TransactionStatus.PENDING)
        url = reverse("payments:transaction-set-status", args=[resp.data["id"]])
        self.assertEqual(self.client.post(url, {"status": "success"}, format="json").status_code, 403)

        self.client.force_authenticate(make_admin())
        resp = self.client.post(url, {"status": "success"}, format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["status"], TransactionStatus.SUCCESS)
