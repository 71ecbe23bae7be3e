import io
import uuid
from decimal import Decimal
from unittest import mock

from django.core.files.storage import default_storage
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase, override_settings
from PIL import Image

from common import queries
from common.exceptions import IndexMissingError, NotFound, ValidationError
from common.test_factories import make_listing, make_user
from marketplace import images, services
from marketplace.models import ListingStatus, MarketplaceListing, OfferStatus, Order, OrderStatus, PaymentStatus
from notifications.models import Notification


def png(name="photo.png", size=(8, 8)):
    buf = io.BytesIO()
    Image.new("RGB", size, color=(200, 120, 40)).save(buf, format="PNG")
    return SimpleUploadedFile(name, buf.getvalue(), content_type="image/png")


class ListingTests(TestCase):
    def setUp(self):
        self.seller = make_user("seller")
        # Listing ids repeat across tests, so give each test its own image root
        isolated = override_settings(MARKETPLACE_IMAGE_ROOT=f"marketplace-{uuid.uuid4().hex}")
        isolated.enable()
        self.addCleanup(isolated.disable)

    def _payload(self, **extra):
        data = {
            "title": "Oak dining table",
            "description": "Seats six",
            "price": "60000",
            "category": "furniture",
            "location": "Gulberg, Lahore",
            "seller_id": self.seller.pk,
        }
        data.update(extra)
        return data

    def test_create_is_pending_and_stores_images_under_listing_folder(self):
        listing = services.create_listing(self._payload(), [png("table 1.png"), png("table-2.png")])
        self.assertEqual(listing.status, ListingStatus.PENDING)
        self.assertEqual(len(listing.images), 2)
        self.assertEqual(listing.cover_image, listing.images[0])
        _, files = default_storage.listdir(images.listing_folder(listing.pk))
        self.assertEqual(len(files), 2)
        self.assertTrue(all(" " not in name for name in files))

    def test_create_requires_fields(self):
        with self.assertRaisesMessage(ValidationError, "location"):
            services.create_listing(self._payload(location=""))
        self.assertFalse(MarketplaceListing.objects.exists())

    def test_non_image_upload_rejected(self):
        listing = make_listing(seller=self.seller)
        bogus = SimpleUploadedFile("notes.png", b"definitely not an image", content_type="image/png")
        with self.assertRaises(ValidationError):
            images.upload_images(listing.pk, [bogus])

    def test_delete_removes_images_then_row(self):
        listing = services.create_listing(self._payload(), [png()])
        folder = images.listing_folder(listing.pk)
        stored = default_storage.listdir(folder)[1]
        self.assertEqual(len(stored), 1)
        services.delete_listing(listing.pk)
        self.assertFalse(MarketplaceListing.objects.filter(pk=listing.pk).exists())
        self.assertFalse(default_storage.exists(f"{folder}/{stored[0]}"))

    def test_update_appends_new_images(self):
        listing = services.create_listing(self._payload(), [png()])
        listing = services.update_listing(listing.pk, {"price": "55000"}, [png("more.png")])
        self.assertEqual(listing.price, Decimal("55000"))
        self.assertEqual(len(listing.images), 2)

    @override_settings(MAX_IMAGES_PER_ITEM=2)
    def test_image_cap_applies_on_create_and_update(self):
        with self.assertRaises(ValidationError):
            services.create_listing(self._payload(), [png("a.png"), png("b.png"), png("c.png")])
        self.assertFalse(MarketplaceListing.objects.exists())

        listing = services.create_listing(self._payload(), [png("a.png"), png("b.png")])
        with self.assertRaisesMessage(ValidationError, "maximum of 2 images"):
            services.update_listing(listing.pk, {}, [png("c.png")])
        listing.refresh_from_db()
        self.assertEqual(len(listing.images), 2)
        _, files = default_storage.listdir(images.listing_folder(listing.pk))
        self.assertEqual(len(files), 2)

    def test_get_all_filters_are_conjunctive_and_default_to_active(self):
        make_listing(seller=self.seller, title="Sofa", price=Decimal("60000"))
        make_listing(seller=self.seller, title="Cheap chair", price=Decimal("5000"))
        make_listing(seller=self.seller, title="Laptop", category="electronics", price=Decimal("90000"))
        make_listing(seller=self.seller, title="Karachi sofa", city="Karachi")
        make_listing(seller=self.seller, title="Pending sofa", status=ListingStatus.PENDING)
        rows = services.get_all(
            {"category": "furniture", "city": "Lahore", "min_price": "10000"}, {"sort_by": "price"}
        )
        self.assertEqual([r.title for r in rows], ["Sofa"])
        rows = services.get_all({"status": ListingStatus.PENDING})
        self.assertEqual([r.title for r in rows], ["Pending sofa"])

    def test_get_all_falls_back_when_index_missing(self):
        make_listing(seller=self.seller, title="Mid", price=Decimal("30000"))
        make_listing(seller=self.seller, title="Low", price=Decimal("10000"))
        make_listing(seller=self.seller, title="High", price=Decimal("90000"))
        make_listing(seller=self.seller, title="Other category", category="toys", price=Decimal("1"))
        real = queries._evaluate
        attempts = []

        def flaky(qs):
            attempts.append(qs)
            if len(attempts) == 1:
                raise IndexMissingError("The query requires an index")
            return real(qs)

        with mock.patch("common.queries._evaluate", side_effect=flaky):
            rows = services.get_all({"category": "furniture"}, {"sort_by": "price", "sort_order": "asc"})
        self.assertEqual(len(attempts), 2)
        self.assertEqual([r.title for r in rows], ["Low", "Mid", "High"])

    def test_view_counter(self):
        listing = make_listing(seller=self.seller)
        services.get_listing(listing.pk)
        self.assertEqual(services.get_listing(listing.pk).views, 2)
        with self.assertRaises(NotFound):
            services.get_listing(999999)

    def test_moderation_notifies_seller(self):
        listing = make_listing(seller=self.seller, status=ListingStatus.PENDING)
        services.approve_listing(listing.pk)
        listing.refresh_from_db()
        self.assertEqual(listing.status, ListingStatus.ACTIVE)
        self.assertIsNotNone(listing.approved_at)
        services.reject_listing(listing.pk, "Blurry photos")
        listing.refresh_from_db()
        self.assertEqual(listing.status, ListingStatus.REMOVED)
        titles = set(Notification.objects.filter(user=self.seller).values_list("title", flat=True))
        self.assertEqual(titles, {"Listing Approved", "Listing Rejected"})


class OfferTests(TestCase):
    def setUp(self):
        self.seller = make_user("seller")
        self.buyer = make_user("buyer")
        self.listing = make_listing(seller=self.seller, price=Decimal("60000"))

    def test_offer_below_price_is_stored_pending(self):
        offer = services.create_offer(
            {"listing_id": self.listing.pk, "buyer_id": self.buyer.pk, "offer_amount": 50000}
        )
        self.assertEqual(offer.status, OfferStatus.PENDING)
        self.assertEqual(offer.offer_amount, Decimal("50000"))
        self.assertTrue(Notification.objects.filter(user=self.seller, title="New Offer").exists())

    def test_unknown_status_rejected(self):
        offer = services.create_offer(
            {"listing_id": self.listing.pk, "buyer_id": self.buyer.pk, "offer_amount": 50000}
        )
        for status in ("sold", "pending", "Accepted"):
            with self.assertRaisesMessage(ValidationError, "Invalid offer status"):
                services.update_offer_status(offer.pk, status)
        offer.refresh_from_db()
        self.assertEqual(offer.status, OfferStatus.PENDING)

    def test_decided_offer_cannot_change(self):
        offer = services.create_offer(
            {"listing_id": self.listing.pk, "buyer_id": self.buyer.pk, "offer_amount": 50000}
        )
        services.update_offer_status(offer.pk, OfferStatus.ACCEPTED)
        self.assertTrue(Notification.objects.filter(user=self.buyer, title="Offer Accepted").exists())
        with self.assertRaises(ValidationError):
            services.update_offer_status(offer.pk, OfferStatus.WITHDRAWN)

    def test_no_offers_on_own_or_sold_listing(self):
        with self.assertRaises(ValidationError):
            services.create_offer({"listing_id": self.listing.pk, "buyer_id": self.seller.pk, "offer_amount": 1})
        services.mark_sold(self.listing.pk)
        with self.assertRaises(ValidationError):
            services.create_offer({"listing_id": self.listing.pk, "buyer_id": self.buyer.pk, "offer_amount": 1})

    def test_offer_lookups(self):
        offer = services.create_offer(
            {"listing_id": self.listing.pk, "buyer_id": self.buyer.pk, "offer_amount": "59000"}
        )
        self.assertEqual([o.pk for o in services.get_offers_by_listing(self.listing.pk)], [offer.pk])
        self.assertEqual([o.pk for o in services.get_offers_by_buyer(self.buyer.pk)], [offer.pk])
        received = services.get_offers_by_seller(self.seller.pk)
        self.assertEqual(received[0].listing.title, self.listing.title)


class OrderTests(TestCase):
    def setUp(self):
        self.buyer = make_user("buyer")
        self.seller = make_user("seller")
        self.lamp = make_listing(seller=self.seller, title="Brass lamp", price=Decimal("2500"))

    def _item(self, **extra):
        item = {
            "item_id": self.lamp.pk,
            "item_type": "marketplace",
            "name": self.lamp.title,
            "price": "2500",
            "quantity": 2,
            "seller_id": self.seller.pk,
        }
        item.update(extra)
        return item

    def test_create_totals_items_and_notifies_buyer(self):
        order = services.create_order(
            {"user_id": self.buyer.pk, "items": [self._item(), self._item(item_id=99, price="1000", quantity=1)],
             "shipping_address": "House 1, Lahore", "payment_method": "cod"}
        )
        self.assertRegex(order.order_number, r"^ORD-\d+-[A-Z0-9]{9}$")
        self.assertEqual(order.total, Decimal("6000"))
        self.assertEqual((order.status, order.payment_status), (OrderStatus.PENDING, PaymentStatus.PENDING))
        self.assertEqual(order.currency, "PKR")
        self.assertEqual(order.items[0]["item_id"], str(self.lamp.pk))
        self.assertEqual(order.items[0]["quantity"], 2)
        note = Notification.objects.get(user=self.buyer, title="Order Placed")
        self.assertIn(order.order_number, note.message)

    def test_invalid_items_are_rejected(self):
        bad_orders = (
            [],
            [self._item(quantity=0)],
            [self._item(quantity="1.5")],
            [self._item(price="-1")],
            [self._item(item_type="car")],
            [{"item_id": 1, "price": "10"}],
        )
        for items in bad_orders:
            with self.assertRaises(ValidationError):
                services.create_order({"user_id": self.buyer.pk, "items": items})
        with self.assertRaisesMessage(ValidationError, "total does not match"):
            services.create_order({"user_id": self.buyer.pk, "items": [self._item()], "total": "100"})
        self.assertFalse(Order.objects.exists())

    def test_order_lookups(self):
        mine = services.create_order({"user_id": self.buyer.pk, "items": [self._item()], "total": "5000"})
        theirs = services.create_order({"user_id": self.seller.pk, "items": [self._item(quantity=1)]})
        self.assertEqual(services.get_order(mine.pk).order_number, mine.order_number)
        self.assertEqual([o.pk for o in services.get_orders_by_user(self.buyer.pk)], [mine.pk])
        self.assertEqual({o.pk for o in services.get_all_orders()}, {mine.pk, theirs.pk})
        with self.assertRaises(NotFound):
            services.get_order(999999)
