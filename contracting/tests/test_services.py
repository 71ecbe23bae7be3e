from decimal import Decimal
from unittest import mock

from django.test import TestCase

from common.exceptions import InvalidTransition, ValidationError
from common.models import DeadLetter
from common.test_factories import make_provider, make_user
from contracting.models import ConstructionRequest, ProjectStatus
from contracting.services import construction_requests, renovation_requests
from notifications import dispatch
from notifications.models import Notification


def construction_payload(user, **extra):
    data = {
        "user_id": user.pk,
        "project_type": "House",
        "description": "Two storey house on a 10 marla plot",
        "budget": "2500000",
    }
    data.update(extra)
    return data


class ConstructionRequestTests(TestCase):
    def setUp(self):
        self.customer = make_user("customer")

    def test_unassigned_request_fans_out_to_approved_providers(self):
        providers = [make_provider(f"builder{i}") for i in range(3)]
        make_provider("reno_only", service_type="renovation")
        make_provider("not_yet", approved=False)
        failing = providers[1].user_id
        real = dispatch.send_notification

        def flaky(user_id, *args, **kwargs):
            if user_id == failing:
                raise RuntimeError("write rejected")
            return real(user_id, *args, **kwargs)

        with mock.patch("notifications.dispatch.send_notification", side_effect=flaky):
            obj = construction_requests.create(construction_payload(self.customer))

        self.assertEqual(obj.status, ProjectStatus.PENDING)
        self.assertEqual(obj.budget, Decimal("2500000"))
        self.assertEqual(Notification.objects.count(), 3)
        self.assertEqual(Notification.objects.filter(user=self.customer).count(), 1)
        self.assertEqual(
            set(Notification.objects.exclude(user=self.customer).values_list("user_id", flat=True)),
            {providers[0].user_id, providers[2].user_id},
        )
        self.assertEqual(DeadLetter.objects.count(), 1)

    def test_selected_provider_must_be_approved_for_service(self):
        reno = make_provider("reno", service_type="renovation")
        with self.assertRaises(ValidationError):
            construction_requests.create(construction_payload(self.customer, provider_id=reno.user_id))
        self.assertFalse(ConstructionRequest.objects.exists())

    def test_missing_fields_rejected_before_write(self):
        with self.assertRaisesMessage(ValidationError, "description"):
            construction_requests.create({"user_id": self.customer.pk, "project_type": "House", "budget": "10"})
        self.assertFalse(ConstructionRequest.objects.exists())

    def test_accept_assigns_provider_and_opens_chat(self):
        provider = make_provider("builder")
        obj = construction_requests.create(construction_payload(self.customer))
        obj = construction_requests.update_status(obj.pk, "Approved", provider_id=provider.user_id)
        self.assertEqual(obj.status, ProjectStatus.ACCEPTED)
        self.assertEqual(obj.provider_id, provider.user_id)
        self.assertIsNotNone(obj.conversation_id)
        self.assertTrue(
            Notification.objects.filter(user=self.customer, title="Construction Request Accepted").exists()
        )

    def test_accept_without_provider_fails(self):
        obj = construction_requests.create(construction_payload(self.customer))
        with self.assertRaises(ValidationError):
            construction_requests.update_status(obj.pk, ProjectStatus.ACCEPTED)
        obj.refresh_from_db()
        self.assertEqual(obj.status, ProjectStatus.PENDING)

    def test_terminal_states_never_move(self):
        provider = make_provider("builder")
        obj = construction_requests.create(construction_payload(self.customer, provider_id=provider.user_id))
        construction_requests.update_status(obj.pk, ProjectStatus.ACCEPTED)
        construction_requests.update_status(obj.pk, ProjectStatus.IN_PROGRESS, progress_note="Foundations poured.")
        construction_requests.update_status(obj.pk, ProjectStatus.COMPLETED)
        for target in (ProjectStatus.PENDING, ProjectStatus.IN_PROGRESS, ProjectStatus.REJECTED):
            with self.assertRaises(InvalidTransition):
                construction_requests.update_status(obj.pk, target)
        obj.refresh_from_db()
        self.assertEqual(obj.status, ProjectStatus.COMPLETED)
        self.assertEqual(obj.progress_note, "Foundations poured.")

    def test_provider_inbox_has_assigned_and_open_requests(self):
        provider = make_provider("builder")
        other = make_provider("other_builder")
        mine = construction_requests.create(construction_payload(self.customer, provider_id=provider.user_id))
        open_one = construction_requests.create(construction_payload(self.customer))
        construction_requests.create(construction_payload(self.customer, provider_id=other.user_id))
        rows = construction_requests.get_by_provider(provider.user_id)
        self.assertEqual({(r.pk, r.is_assigned) for r in rows}, {(mine.pk, True), (open_one.pk, False)})


class RenovationRequestTests(TestCase):
    def test_selected_provider_gets_conversation_on_create(self):
        customer = make_user("customer")
        provider = make_provider("renovator", service_type="renovation")
        obj = renovation_requests.create(
            {
                "user_id": customer.pk,
                "provider_id": provider.user_id,
                "service_category": "Kitchen",
                "detailed_description": "Replace cabinets and counters",
                "budget": 400000,
                "photos": "https://cdn.example.com/kitchen.jpg",
            }
        )
        self.assertIsNotNone(obj.conversation_id)
        self.assertEqual(obj.photos, ["https://cdn.example.com/kitchen.jpg"])
        self.assertTrue(Notification.objects.filter(user_id=provider.user_id, title="New Renovation Request").exists())
