from decimal import Decimal
from unittest import mock

from django.test import TestCase

from common.exceptions import InvalidTransition, ValidationError
from common.models import DeadLetter, DeadLetterKind
from common.test_factories import make_property, make_provider, make_user
from contracting.models import ProjectStatus
from contracting.services import construction_requests
from payments import services
from payments.models import TargetType, Transaction, TransactionStatus
from properties.models import RentalStatus
from properties.services import rental_requests


class TransactionTests(TestCase):
    def setUp(self):
        self.payer = make_user("payer")

    def test_create_validates_amount_and_target(self):
        with self.assertRaises(ValidationError):
            services.create(self.payer.pk, TargetType.RENTAL, 1, "0")
        with self.assertRaises(ValidationError):
            services.create(self.payer.pk, "subscription", 1, "100")
        with self.assertRaises(ValidationError):
            services.create(self.payer.pk, TargetType.RENTAL, None, "100")
        self.assertFalse(Transaction.objects.exists())

    def test_settled_transaction_is_immutable(self):
        txn = services.create(self.payer.pk, TargetType.PROPERTY, 7, "1500")
        services.update_status(txn.pk, TransactionStatus.FAILED)
        with self.assertRaises(InvalidTransition):
            services.update_status(txn.pk, TransactionStatus.SUCCESS)
        txn.refresh_from_db()
        self.assertEqual(txn.status, TransactionStatus.FAILED)
        self.assertIsNotNone(txn.settled_at)

    def test_unknown_status_rejected(self):
        txn = services.create(self.payer.pk, TargetType.PROPERTY, 7, "1500")
        with self.assertRaises(ValidationError):
            services.update_status(txn.pk, "refunded")

    def test_lookups(self):
        mine = services.create(self.payer.pk, TargetType.PROPERTY, 7, "1500")
        services.create(make_user("other").pk, TargetType.PROPERTY, 8, "10")
        self.assertEqual([t.pk for t in services.get_by_user(self.payer.pk)], [mine.pk])
        self.assertEqual(len(services.get_all()), 2)
        self.assertEqual(services.get_by_id(mine.pk).amount, Decimal("1500"))


class PaymentSyncTests(TestCase):
    def setUp(self):
        self.owner = make_user("landlord")
        self.tenant = make_user("tenant")
        prop = make_property(owner=self.owner)
        self.rental = rental_requests.create({"user_id": self.tenant.pk, "property_id": prop.pk})

    def test_successful_payment_advances_accepted_rental_to_paid(self):
        rental_requests.update_status(self.rental.pk, RentalStatus.ACCEPTED)
        txn = services.create(self.tenant.pk, TargetType.RENTAL, self.rental.pk, "45000")
        services.update_status(txn.pk, TransactionStatus.SUCCESS)
        self.rental.refresh_from_db()
        self.assertEqual(self.rental.status, RentalStatus.PAID)

    def test_sync_is_idempotent(self):
        self.assertEqual(services.update_request_status_on_payment(TargetType.RENTAL, self.rental.pk), RentalStatus.CONFIRMED)
        self.rental.refresh_from_db()
        first_update = self.rental.updated_at
        self.assertIsNone(services.update_request_status_on_payment(TargetType.RENTAL, self.rental.pk))
        self.rental.refresh_from_db()
        self.assertEqual(self.rental.status, RentalStatus.CONFIRMED)
        self.assertEqual(self.rental.updated_at, first_update)

    def test_repeated_success_does_not_write_twice(self):
        txn = services.create(self.tenant.pk, TargetType.RENTAL, self.rental.pk, "45000")
        services.update_status(txn.pk, TransactionStatus.SUCCESS)
        with mock.patch("payments.services.update_request_status_on_payment") as sync:
            services.update_status(txn.pk, TransactionStatus.SUCCESS)
        sync.assert_not_called()
        self.rental.refresh_from_db()
        self.assertEqual(self.rental.status, RentalStatus.CONFIRMED)

    def test_project_only_moves_from_pending(self):
        customer = make_user("customer")
        provider = make_provider("builder")
        project = construction_requests.create(
            {
                "user_id": customer.pk,
                "provider_id": provider.user_id,
                "project_type": "Boundary wall",
                "description": "120 ft wall",
                "budget": "300000",
            }
        )
        construction_requests.update_status(project.pk, ProjectStatus.ACCEPTED)
        self.assertIsNone(services.update_request_status_on_payment(TargetType.CONSTRUCTION, project.pk))
        project.refresh_from_db()
        self.assertEqual(project.status, ProjectStatus.ACCEPTED)

    def test_sync_failures_are_swallowed_and_dead_lettered(self):
        txn = services.create(self.tenant.pk, TargetType.RENTAL, 999999, "100")
        services.update_status(txn.pk, TransactionStatus.SUCCESS)
        txn.refresh_from_db()
        self.assertEqual(txn.status, TransactionStatus.SUCCESS)
        letter = DeadLetter.objects.get(kind=DeadLetterKind.PAYMENT_SYNC)
        self.assertEqual(letter.payload["target_id"], 999999)
