import io
import uuid

from django.test import override_settings
from django.urls import reverse
from PIL import Image
from rest_framework.test import APITestCase

from common.test_factories import make_admin, make_listing, make_user
from marketplace.models import ListingStatus


def jpeg():
    buf = io.BytesIO()
    Image.new("RGB", (4, 4)).save(buf, format="JPEG")
    buf.seek(0)
    buf.name = "lamp.jpg"
    return buf


class MarketplaceApiTests(APITestCase):
    def setUp(self):
        self.seller = make_user("seller")
        self.buyer = make_user("buyer")

    def test_browse_shows_active_only(self):
        make_listing(seller=self.seller, title="Visible")
        make_listing(seller=self.seller, title="Waiting", status=ListingStatus.PENDING)
        resp = self.client.get(reverse("marketplace:listing-list"))
        self.assertEqual([row["title"] for row in resp.data], ["Visible"])

    def test_pending_listing_hidden_from_strangers(self):
        listing = make_listing(seller=self.seller, status=ListingStatus.PENDING)
        resp = self.client.get(reverse("marketplace:listing-detail", args=[listing.pk]))
        self.assertEqual(resp.status_code, 404)
        self.client.force_authenticate(self.seller)
        resp = self.client.get(reverse("marketplace:listing-detail", args=[listing.pk]))
        self.assertEqual(resp.status_code, 200)

    @override_settings(MARKETPLACE_IMAGE_ROOT=f"api-{uuid.uuid4().hex}")
    def test_multipart_create(self):
        self.client.force_authenticate(self.seller)
        resp = self.client.post(
            reverse("marketplace:listing-list"),
            {
                "title": "Brass lamp",
                "description": "Works fine",
                "price": "4500",
                "category": "decor",
                "location": "Model Town",
                "images": [jpeg()],
            },
            format="multipart",
        )
        self.assertEqual(resp.status_code, 201, resp.data)
        self.assertEqual(resp.data["status"], ListingStatus.PENDING)
        self.assertEqual(len(resp.data["images"]), 1)

    def test_offer_flow(self):
        listing = make_listing(seller=self.seller)
        self.client.force_authenticate(self.buyer)
        resp = self.client.post(
            reverse("marketplace:offer-list"), {"listing_id": listing.pk, "offer_amount": "50000"}, format="json"
        )
        self.assertEqual(resp.status_code, 201)
        offer_url = reverse("marketplace:offer-set-status", args=[resp.data["id"]])
        self.assertEqual(self.client.post(offer_url, {"status": "accepted"}, format="json").status_code, 403)

        self.client.force_authenticate(self.seller)
        received = self.client.get(reverse("marketplace:offer-received"))
        self.assertEqual(received.data[0]["listing"]["id"], listing.pk)
        resp = self.client.post(offer_url, {"status": "sold"}, format="json")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data["message"], "Invalid offer status")
        resp = self.client.post(offer_url, {"status": "accepted"}, format="json")
        self.assertEqual(resp.data["status"], "accepted")


class OrderApiTests(APITestCase):
    def setUp(self):
        self.buyer = make_user("buyer")
        self.listing = make_listing(seller=make_user("seller"))
        self.item = {"item_id": self.listing.pk, "item_type": "marketplace", "price": "60000", "quantity": 1}

    def test_buyer_places_and_reads_own_orders_only(self):
        self.client.force_authenticate(self.buyer)
        resp = self.client.post(reverse("marketplace:order-list"), {"items": [self.item]}, format="json")
        self.assertEqual(resp.status_code, 201)
        order_url = reverse("marketplace:order-detail", args=[resp.data["id"]])
        self.assertEqual(self.client.get(order_url).data["total"], "60000.00")
        self.assertEqual(len(self.client.get(reverse("marketplace:order-list")).data), 1)

        self.client.force_authenticate(make_user("nosy"))
        self.assertEqual(self.client.get(order_url).status_code, 404)
        self.assertEqual(self.client.get(reverse("marketplace:order-all")).status_code, 403)

        self.client.force_authenticate(make_admin())
        self.assertEqual(len(self.client.get(reverse("marketplace:order-all")).data), 1)
