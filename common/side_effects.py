"""
Fire-and-forget side effects with a dead-letter channel.

A notification or chat creation that follows a successful status update must
not fail that update. ``best_effort`` runs the side effect inside a savepoint,
and on failure logs it and records a ``DeadLetter`` row instead of raising.
"""
import logging

from django.db import transaction

from .models import DeadLetter

logger = logging.getLogger(__name__)


def _jsonable(value):
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    if isinstance(value, (list, tuple, set)):
        return [_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    return str(value)


def record_dead_letter(kind, payload, error):
    """Persist a failed side effect. Returns the row, or None if even that failed."""
    try:
        with transaction.atomic():
            return DeadLetter.objects.create(
                kind=kind,
                payload=_jsonable(payload or {}),
                error=str(error)[:2000],
            )
    except Exception:
        logger.exception("record_dead_letter: could not persist %s failure", kind)
        return None


def best_effort(kind, func, *args, **kwargs):
    """Call ``func`` once; on failure log, dead-letter and return None."""
    try:
        with transaction.atomic():
            return func(*args, **kwargs)
    except Exception as exc:
        logger.warning("%s side effect failed: %s", kind, exc)
        record_dead_letter(kind, {"args": args, "kwargs": kwargs}, exc)
        return None
