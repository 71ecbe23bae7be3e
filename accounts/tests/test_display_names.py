from django.core.cache import caches
from django.test import TestCase

from accounts.display_names import FALLBACK_NAME, resolve_display_name, resolve_display_names
from common.test_factories import make_user


class DisplayNameTests(TestCase):
    def setUp(self):
        caches["display_names"].clear()

    def test_fallback_chain(self):
        user = make_user("zara", email="zara.k@example.com")
        self.assertEqual(resolve_display_name(user.pk), "zara.k")

        user.first_name, user.last_name = "Zara", "Khan"
        user.save()
        self.assertEqual(resolve_display_name(user.pk), "Zara Khan")

        user.profile.display_name = "ZK Estates"
        user.profile.save()
        self.assertEqual(resolve_display_name(user.pk), "ZK Estates")

    def test_unknown_user_is_not_cached(self):
        self.assertEqual(resolve_display_name(9999), FALLBACK_NAME)
        self.assertIsNone(caches["display_names"].get("display_name:9999"))

    def test_cached_until_user_saved(self):
        user = make_user("omar", email="")
        self.assertEqual(resolve_display_name(user.pk), "omar")
        with self.assertNumQueries(0):
            resolve_display_name(user.pk)

    def test_bulk_resolution_skips_blanks(self):
        a, b = make_user("a1"), make_user("b1")
        names = resolve_display_names([a.pk, b.pk, a.pk, None])
        self.assertEqual(set(names), {a.pk, b.pk})
