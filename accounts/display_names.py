"""
Display-name resolution behind a bounded read-through cache.

Every module that shows a user's name calls ``resolve_display_name``; entries
live in the ``display_names`` cache alias (a LocMemCache with MAX_ENTRIES, so
least recently used names are culled) and are dropped when the user or the
profile is saved.
"""
from django.contrib.auth import get_user_model
from django.core.cache import caches

FALLBACK_NAME = "User"


def _cache():
    return caches["display_names"]


def _key(user_id) -> str:
    return f"display_name:{user_id}"


def compute_display_name(user) -> str:
    profile = getattr(user, "profile", None)
    if profile is not None and profile.display_name.strip():
        return profile.display_name.strip()
    full_name = user.get_full_name().strip()
    if full_name:
        return full_name
    if user.email:
        return user.email.split("@", 1)[0]
    return user.username or FALLBACK_NAME


def resolve_display_name(user_id) -> str:
    if not user_id:
        return FALLBACK_NAME
    cache = _cache()
    name = cache.get(_key(user_id))
    if name is not None:
        return name
    user = get_user_model().objects.select_related("profile").filter(pk=user_id).first()
    if user is None:
        # Unknown ids are not cached so a later signup resolves correctly
        return FALLBACK_NAME
    name = compute_display_name(user)
    cache.set(_key(user_id), name, timeout=None)
    return name


def resolve_display_names(user_ids) -> dict:
    return {uid: resolve_display_name(uid) for uid in set(user_ids) if uid}


def invalidate_display_name(user_id):
    _cache().delete(_key(user_id))
