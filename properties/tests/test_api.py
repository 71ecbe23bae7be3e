import uuid

from django.test import override_settings
from django.urls import reverse
from rest_framework.test import APITestCase

from common.test_factories import make_property, make_user
from properties.models import BuySellStatus
from properties.tests.test_services import png


class PropertyApiTests(APITestCase):
    def setUp(self):
        self.owner = make_user("landlord")
        self.prop = make_property(owner=self.owner, listing_type="sale")

    def test_anonymous_can_browse(self):
        resp = self.client.get(reverse("properties:property-list"))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(len(resp.data), 1)

    def test_only_owner_edits(self):
        self.client.force_authenticate(make_user("stranger"))
        resp = self.client.patch(reverse("properties:property-detail", args=[self.prop.pk]), {"title": "Mine now"}, format="json")
        self.assertEqual(resp.status_code, 403)
        self.client.force_authenticate(self.owner)
        resp = self.client.patch(reverse("properties:property-detail", args=[self.prop.pk]), {"title": "Renamed"}, format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["title"], "Renamed")

    def test_buyer_may_only_cancel_own_offer(self):
        buyer = make_user("buyer")
        self.client.force_authenticate(buyer)
        resp = self.client.post(
            reverse("properties:buy-sell-request-list"),
            {"property_id": self.prop.pk, "offer_amount": "100000"},
            format="json",
        )
        self.assertEqual(resp.status_code, 201)
        url = reverse("properties:buy-sell-request-set-status", args=[resp.data["id"]])
        self.assertEqual(self.client.post(url, {"status": "Accepted"}, format="json").status_code, 403)

        self.client.force_authenticate(self.owner)
        self.assertEqual(self.client.post(url, {"status": "Accepted"}, format="json").data["status"], BuySellStatus.ACCEPTED)

        self.client.force_authenticate(buyer)
        resp = self.client.post(url, {"status": "Cancelled"}, format="json")
        self.assertEqual(resp.data["status"], BuySellStatus.CANCELLED)

    def test_invalid_transition_returns_conflict_toast(self):
        buyer = make_user("buyer")
        self.client.force_authenticate(buyer)
        created = self.client.post(
            reverse("properties:buy-sell-request-list"),
            {"property_id": self.prop.pk, "offer_amount": "100000"},
            format="json",
        )
        self.client.force_authenticate(self.owner)
        resp = self.client.post(
            reverse("properties:buy-sell-request-set-status", args=[created.data["id"]]), {"status": "Paid"}, format="json"
        )
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.data["code"], "invalid_transition")

    def test_owner_uploads_and_clears_photos(self):
        url = reverse("properties:property-images", args=[self.prop.pk])
        self.client.force_authenticate(make_user("stranger"))
        self.assertEqual(self.client.post(url, {"images": [png()]}, format="multipart").status_code, 403)
        self.client.force_authenticate(self.owner)
        with override_settings(PROPERTY_IMAGE_ROOT=f"properties-{uuid.uuid4().hex}"):
            resp = self.client.post(url, {"images": [png()]}, format="multipart")
            self.assertEqual(resp.status_code, 200)
            self.assertEqual(len(resp.data["photos"]), 1)
            self.assertEqual(resp.data["cover_image"], resp.data["photos"][0])
            resp = self.client.delete(url)
        self.assertEqual(resp.data["photos"], [])
