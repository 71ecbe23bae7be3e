"""
Saved properties and marketplace listings.

A user favorites a target at most once. The target's ``favorites_count``
moves with the rows: it is incremented only when a favorite is created and
decremented only when one is removed, so repeated adds or removes leave it
unchanged.
"""
import logging

from django.apps import apps
from django.db import transaction
from django.db.models import F

from common.exceptions import NotFound, ValidationError
from common.queries import fetch_ordered
from common.services import service_call

from .models import Favorite, FavoriteTarget

logger = logging.getLogger(__name__)

TARGET_MODELS = {
    FavoriteTarget.PROPERTY: "properties.Property",
    FavoriteTarget.LISTING: "marketplace.MarketplaceListing",
}


def _target(target_type, target_id):
    if target_type not in FavoriteTarget.values:
        raise ValidationError(f"Invalid target type. Must be one of: {', '.join(FavoriteTarget.values)}")
    try:
        target_id = int(target_id)
    except (TypeError, ValueError):
        raise ValidationError("target_id must be an integer")
    return apps.get_model(TARGET_MODELS[target_type]), target_id


@service_call("Failed to add favorite")
def add_to_favorites(user_id, target_type, target_id):
    model, target_id = _target(target_type, target_id)
    if not model.objects.filter(pk=target_id).exists():
        raise NotFound(f"{model._meta.verbose_name.capitalize()} not found")
    with transaction.atomic():
        favorite, created = Favorite.objects.get_or_create(
            user_id=user_id, target_type=target_type, target_id=target_id
        )
        if created:
            model.objects.filter(pk=target_id).update(favorites_count=F("favorites_count") + 1)
            logger.info("user %s favorited %s %s", user_id, target_type, target_id)
    return favorite


@service_call("Failed to remove favorite")
def remove_from_favorites(user_id, target_type, target_id) -> bool:
    model, target_id = _target(target_type, target_id)
    with transaction.atomic():
        deleted, _ = Favorite.objects.filter(user_id=user_id, target_type=target_type, target_id=target_id).delete()
        if deleted:
            model.objects.filter(pk=target_id, favorites_count__gt=0).update(favorites_count=F("favorites_count") - 1)
    return bool(deleted)


@service_call("Failed to toggle favorite")
def toggle_favorite(user_id, target_type, target_id) -> bool:
    """Flip the favorite; returns True when the target is now a favorite."""
    if remove_from_favorites(user_id, target_type, target_id):
        return False
    add_to_favorites(user_id, target_type, target_id)
    return True


@service_call("Failed to fetch favorites")
def get_favorites(user_id, target_type=None):
    qs = Favorite.objects.filter(user_id=user_id)
    if target_type:
        if target_type not in FavoriteTarget.values:
            raise ValidationError(f"Invalid target type. Must be one of: {', '.join(FavoriteTarget.values)}")
        qs = qs.filter(target_type=target_type)
    return fetch_ordered(qs, "-created_at")


def is_favorite(user_id, target_type, target_id) -> bool:
    return Favorite.objects.filter(user_id=user_id, target_type=target_type, target_id=target_id).exists()
