"""
Reviews and ratings.

One review per (author, target). The pre-check gives a friendly error in the
common case; the unique constraint catches two submissions racing past it.
"""
import logging
from decimal import Decimal, InvalidOperation

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import Avg, Count

from common.exceptions import DuplicateReview, NotFound, ValidationError
from common.queries import fetch_ordered
from common.services import clean_text, require_fields, service_call

from .models import Review, ReviewTarget

logger = logging.getLogger(__name__)


def has_reviewed(author_id, target_type, target_id) -> bool:
    return Review.objects.filter(author_id=author_id, target_type=target_type, target_id=target_id).exists()


def _whole_rating(value):
    """Ratings are whole stars; 4.5 or "5.5" are rejected, not truncated."""
    if isinstance(value, bool):
        raise ValidationError("Rating must be a number")
    try:
        rating = Decimal(str(value).strip())
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError("Rating must be a number")
    if not rating.is_finite() or not 1 <= rating <= 5:
        raise ValidationError("Rating must be between 1 and 5")
    if rating != rating.to_integral_value():
        raise ValidationError("Rating must be a whole number")
    return int(rating)


def _validate(data):
    require_fields(data, ["author_id", "target_type", "target_id", "rating", "comment"])
    if data["target_type"] not in ReviewTarget.values:
        raise ValidationError(f"Invalid target type. Must be one of: {', '.join(ReviewTarget.values)}")
    rating = _whole_rating(data["rating"])
    try:
        target_id = int(data["target_id"])
    except (TypeError, ValueError):
        raise ValidationError("target_id must be an integer")
    comment = clean_text(data["comment"], 2000)
    min_len = getattr(settings, "REVIEW_MIN_COMMENT_LENGTH", 10)
    if len(comment) < min_len:
        raise ValidationError(f"Comment must be at least {min_len} characters")
    return rating, target_id, comment


@service_call("Failed to create review")
def create(data):
    rating, target_id, comment = _validate(data)
    author_id, target_type = data["author_id"], data["target_type"]
    if has_reviewed(author_id, target_type, target_id):
        raise DuplicateReview()
    try:
        with transaction.atomic():
            review = Review.objects.create(
                author_id=author_id, target_type=target_type, target_id=target_id, rating=rating, comment=comment
            )
    except IntegrityError:
        logger.info("duplicate review by %s on %s:%s", author_id, target_type, target_id)
        raise DuplicateReview()
    logger.info("review %s on %s:%s by %s", review.pk, target_type, target_id, author_id)
    return review


@service_call("Failed to fetch reviews")
def get_by_target(target_type, target_id):
    return fetch_ordered(Review.objects.filter(target_type=target_type, target_id=target_id), "-created_at")


@service_call("Failed to fetch review")
def get_user_review(author_id, target_type, target_id):
    return Review.objects.filter(author_id=author_id, target_type=target_type, target_id=target_id).first()


@service_call("Failed to compute rating")
def get_average_rating(target_type, target_id):
    agg = Review.objects.filter(target_type=target_type, target_id=target_id).aggregate(
        average=Avg("rating"), count=Count("id")
    )
    if not agg["count"]:
        return {"average": 0, "count": 0}
    return {"average": round(float(agg["average"]), 1), "count": agg["count"]}


@service_call("Failed to fetch review")
def get_by_id(review_id):
    try:
        return Review.objects.get(pk=review_id)
    except (Review.DoesNotExist, ValueError, TypeError):
        raise NotFound("Review not found")


@service_call("Failed to delete review")
def delete(review_id):
    deleted, _ = Review.objects.filter(pk=review_id).delete()
    if not deleted:
        raise NotFound("Review not found")
    logger.info("review %s deleted", review_id)
