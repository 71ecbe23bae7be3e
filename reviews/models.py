from django.conf import settings
from django.db import models

from common.models import TimeStampedModel


class ReviewTarget(models.TextChoices):
    PROPERTY = "property", "Property"
    CONSTRUCTION = "construction", "Construction project"
    RENOVATION = "renovation", "Renovation project"
    PROVIDER = "provider", "Service provider"
    LISTING = "listing", "Marketplace listing"


class Review(TimeStampedModel):
    """A 1-5 star rating with comment; one per author and target."""
    author = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="reviews")
    target_type = models.CharField(max_length=16, choices=ReviewTarget.choices)
    target_id = models.PositiveBigIntegerField()
    rating = models.PositiveSmallIntegerField()
    comment = models.TextField()

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["target_type", "target_id", "created_at"], name="idx_review_target"),
        ]
        constraints = [
            models.UniqueConstraint(fields=["author", "target_type", "target_id"], name="uniq_review_author_target"),
            models.CheckConstraint(
                condition=models.Q(rating__gte=1) & models.Q(rating__lte=5), name="ck_review_rating_1_5"
            ),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"Review {self.rating} on {self.target_type}:{self.target_id} by {self.author_id}"
