from unittest import mock

from django.test import TestCase

from common.exceptions import DuplicateReview, NotFound, ValidationError
from common.test_factories import make_user
from reviews import services
from reviews.models import Review


def payload(author, **extra):
    data = {
        "author_id": author.pk,
        "target_type": "property",
        "target_id": 11,
        "rating": 4,
        "comment": "Spacious and well kept.",
    }
    data.update(extra)
    return data


class ReviewTests(TestCase):
    def setUp(self):
        self.author = make_user("reviewer")

    def test_rating_and_comment_validation(self):
        for bad in ({"rating": 0}, {"rating": 6}, {"rating": "five"}, {"comment": "Too short"}, {"target_type": "city"}):
            with self.assertRaises(ValidationError):
                services.create(payload(self.author, **bad))
        self.assertFalse(Review.objects.exists())

    def test_fractional_ratings_are_rejected_not_truncated(self):
        for bad in (5.5, 0.5, "4.5"):
            with self.assertRaises(ValidationError):
                services.create(payload(self.author, rating=bad))
        self.assertFalse(Review.objects.exists())
        review = services.create(payload(self.author, rating="4.0"))
        self.assertEqual(review.rating, 4)

    def test_second_review_is_duplicate(self):
        services.create(payload(self.author))
        with self.assertRaises(DuplicateReview):
            services.create(payload(self.author, rating=1, comment="Changed my mind entirely."))

    def test_race_past_precheck_still_yields_one_review(self):
        services.create(payload(self.author))
        with mock.patch("reviews.services.has_reviewed", return_value=False):
            with self.assertRaises(DuplicateReview):
                services.create(payload(self.author))
        self.assertEqual(Review.objects.count(), 1)

    def test_average_rating(self):
        self.assertEqual(services.get_average_rating("property", 11), {"average": 0, "count": 0})
        services.create(payload(self.author, rating=5))
        services.create(payload(make_user("second"), rating=4))
        services.create(payload(make_user("third"), rating=4))
        services.create(payload(make_user("elsewhere"), target_id=12, rating=1))
        self.assertEqual(services.get_average_rating("property", 11), {"average": 4.3, "count": 3})

    def test_lookups_and_delete(self):
        review = services.create(payload(self.author))
        self.assertEqual(services.get_user_review(self.author.pk, "property", 11).pk, review.pk)
        self.assertIsNone(services.get_user_review(self.author.pk, "property", 99))
        self.assertEqual([r.pk for r in services.get_by_target("property", 11)], [review.pk])
        services.delete(review.pk)
        with self.assertRaises(NotFound):
            services.delete(review.pk)
