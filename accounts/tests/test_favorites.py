from django.test import TestCase
from django.urls import reverse
from rest_framework.test import APITestCase

from accounts import favorites
from accounts.models import Favorite
from common.exceptions import NotFound, ValidationError
from common.test_factories import make_listing, make_property, make_user
from properties import services as properties_services


class FavoriteServiceTests(TestCase):
    def setUp(self):
        self.owner = make_user("landlord")
        self.user = make_user("house_hunter")
        self.prop = make_property(owner=self.owner)

    def _count(self):
        self.prop.refresh_from_db()
        return self.prop.favorites_count

    def test_add_is_idempotent_and_counts_once(self):
        first = favorites.add_to_favorites(self.user.pk, "property", self.prop.pk)
        again = favorites.add_to_favorites(self.user.pk, "property", str(self.prop.pk))
        self.assertEqual(first.pk, again.pk)
        self.assertEqual(self._count(), 1)
        favorites.add_to_favorites(make_user("second").pk, "property", self.prop.pk)
        self.assertEqual(self._count(), 2)

    def test_remove_only_decrements_existing_favorites(self):
        self.assertFalse(favorites.remove_from_favorites(self.user.pk, "property", self.prop.pk))
        self.assertEqual(self._count(), 0)
        favorites.add_to_favorites(self.user.pk, "property", self.prop.pk)
        self.assertTrue(favorites.remove_from_favorites(self.user.pk, "property", self.prop.pk))
        self.assertEqual(self._count(), 0)
        self.assertFalse(Favorite.objects.exists())

    def test_toggle_flips_and_tracks_listing_counter(self):
        listing = make_listing(seller=self.owner)
        self.assertTrue(favorites.toggle_favorite(self.user.pk, "listing", listing.pk))
        listing.refresh_from_db()
        self.assertEqual(listing.favorites_count, 1)
        self.assertTrue(favorites.is_favorite(self.user.pk, "listing", listing.pk))
        self.assertFalse(favorites.toggle_favorite(self.user.pk, "listing", listing.pk))
        listing.refresh_from_db()
        self.assertEqual(listing.favorites_count, 0)

    def test_get_favorites_filters_by_type(self):
        listing = make_listing(seller=self.owner)
        favorites.add_to_favorites(self.user.pk, "property", self.prop.pk)
        favorites.add_to_favorites(self.user.pk, "listing", listing.pk)
        self.assertEqual(len(favorites.get_favorites(self.user.pk)), 2)
        rows = favorites.get_favorites(self.user.pk, "property")
        self.assertEqual([(f.target_type, f.target_id) for f in rows], [("property", self.prop.pk)])

    def test_deleting_target_drops_its_favorites(self):
        favorites.add_to_favorites(self.user.pk, "property", self.prop.pk)
        properties_services.delete_property(self.prop.pk)
        self.assertEqual(favorites.get_favorites(self.user.pk), [])

    def test_unknown_target_rejected(self):
        with self.assertRaises(NotFound):
            favorites.add_to_favorites(self.user.pk, "property", 999999)
        with self.assertRaises(ValidationError):
            favorites.add_to_favorites(self.user.pk, "city", self.prop.pk)
        self.assertFalse(Favorite.objects.exists())


class FavoriteApiTests(APITestCase):
    def setUp(self):
        self.user = make_user("house_hunter")
        self.prop = make_property(owner=make_user("landlord"))
        self.client.force_authenticate(self.user)

    def test_toggle_then_list(self):
        target = {"target_type": "property", "target_id": self.prop.pk}
        resp = self.client.post(reverse("accounts:favorite-toggle"), target, format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertTrue(resp.data["data"]["favorite"])
        resp = self.client.get(reverse("accounts:favorite-list"), {"target_type": "property"})
        self.assertEqual([row["target_id"] for row in resp.data], [self.prop.pk])
        resp = self.client.post(reverse("accounts:favorite-remove"), target, format="json")
        self.assertFalse(resp.data["data"]["favorite"])
        self.assertEqual(self.client.get(reverse("accounts:favorite-list")).data, [])

    def test_anonymous_cannot_favorite(self):
        self.client.force_authenticate(None)
        resp = self.client.post(
            reverse("accounts:favorite-list"), {"target_type": "property", "target_id": self.prop.pk}, format="json"
        )
        self.assertIn(resp.status_code, (401, 403))
