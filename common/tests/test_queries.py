from decimal import Decimal
from unittest import mock

from django.db import DatabaseError
from django.test import TestCase

from common import queries
from common.exceptions import IndexMissingError
from common.test_factories import make_property, make_user
from properties.models import Property


class FetchOrderedTests(TestCase):
    def setUp(self):
        owner = make_user("owner")
        self.cheap = make_property(owner=owner, title="Cheap", price=Decimal("10000"))
        self.mid = make_property(owner=owner, title="Mid", price=Decimal("30000"))
        self.dear = make_property(owner=owner, title="Dear", price=Decimal("90000"), city="Karachi")

    def test_ordered_query(self):
        rows = queries.fetch_ordered(Property.objects.all(), "-price")
        self.assertEqual([p.title for p in rows], ["Dear", "Mid", "Cheap"])

    def test_index_missing_falls_back_to_client_sort_with_same_filters(self):
        real = queries._evaluate
        calls = []

        def flaky(qs):
            calls.append(qs)
            if len(calls) == 1:
                raise IndexMissingError("The query requires an index")
            return real(qs)

        qs = Property.objects.filter(city="Lahore")
        with mock.patch("common.queries._evaluate", side_effect=flaky):
            rows = queries.fetch_ordered(qs, "price", limit=1)
        self.assertEqual(len(calls), 2)
        self.assertEqual([p.title for p in rows], ["Cheap"])

    def test_other_database_errors_propagate(self):
        with mock.patch("common.queries._evaluate", side_effect=DatabaseError("disk I/O error")):
            with self.assertRaises(DatabaseError):
                queries.fetch_ordered(Property.objects.all(), "price")

    def test_database_errors_mentioning_an_index_are_not_treated_as_missing_index(self):
        failure = DatabaseError("UNIQUE constraint failed: index idx_property_browse is corrupt")
        with mock.patch("common.queries._evaluate", side_effect=failure) as evaluate:
            with self.assertRaises(DatabaseError):
                queries.fetch_ordered(Property.objects.all(), "price")
        self.assertEqual(evaluate.call_count, 1)
        self.assertFalse(queries.is_index_missing(failure))
        self.assertTrue(queries.is_index_missing(IndexMissingError("requires an index")))

    def test_sort_records_puts_missing_timestamps_last_when_descending(self):
        class Row:
            def __init__(self, name, created_at):
                self.name, self.created_at = name, created_at

        rows = queries.sort_records([Row("none", None), Row("new", self.dear.created_at)], ["-created_at"])
        self.assertEqual([r.name for r in rows], ["new", "none"])
