"""
Ordered query helper.

Some filter + sort combinations need an index the store may not have. Instead
of branching at every call site, ``fetch_ordered`` runs the ordered query and,
when the store reports a missing index, re-runs it unordered and sorts in
memory. The filters are part of the queryset, so both paths return exactly
the same rows.
"""
import logging
from datetime import datetime, timezone as dt_timezone

from django.db import DatabaseError

from .exceptions import IndexMissingError

logger = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=dt_timezone.utc)


def is_index_missing(exc) -> bool:
    return isinstance(exc, IndexMissingError)


def _evaluate(queryset):
    return list(queryset)


def _sort_value(record, field):
    value = getattr(record, field, None)
    if value is None:
        # Missing timestamps sort as the epoch, missing numbers as zero
        return _EPOCH if field.endswith("_at") else 0
    return value


def sort_records(records, ordering):
    """Stable in-memory sort honouring Django style ``-field`` ordering."""
    rows = list(records)
    for field in reversed(list(ordering)):
        descending = field.startswith("-")
        name = field.lstrip("-")
        rows.sort(key=lambda r: _sort_value(r, name), reverse=descending)
    return rows


def fetch_ordered(queryset, *ordering, limit=None):
    """Evaluate ``queryset`` ordered by ``ordering``, falling back to a client-side sort."""
    ordering = ordering or ("-created_at",)
    try:
        ordered = queryset.order_by(*ordering)
        if limit:
            ordered = ordered[:limit]
        return _evaluate(ordered)
    except DatabaseError as exc:
        if not is_index_missing(exc):
            raise
        logger.warning(
            "fetch_ordered: index missing for %s ordering=%s, sorting client-side",
            queryset.model.__name__,
            ",".join(ordering),
        )
    rows = sort_records(_evaluate(queryset.order_by()), ordering)
    if limit:
        rows = rows[:limit]
    return rows
