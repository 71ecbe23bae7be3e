from django.test import override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from accounts.models import ServiceProvider
from common.test_factories import make_admin, make_listing, make_property, make_provider, make_user
from marketplace.models import ListingStatus
from notifications.models import BroadcastJob, BroadcastStatus, Notification
from properties.models import PropertyStatus, RentalRequest
from support.models import SupportTicket, TicketStatus


class AdminPanelTestCase(APITestCase):
    def setUp(self):
        self.admin = make_admin("ops")
        self.member = make_user("member")
        self.client.force_authenticate(self.admin)


class DashboardTests(AdminPanelTestCase):
    def test_counts_pending_work(self):
        make_provider("approved_builder")
        make_provider("waiting_builder", approved=False)
        rejected = make_provider("rejected_builder", approved=False)
        rejected.set_approval(False, "Missing licence")
        rejected.save()
        make_property(owner=self.member, status=PropertyStatus.PENDING)
        make_listing(seller=self.member, status=ListingStatus.PENDING)
        make_listing(seller=self.member, title="Lamp")
        SupportTicket.objects.create(user=self.member, name="m", email="m@example.com", subject="a", message="b")
        SupportTicket.objects.create(
            user=self.member, name="m", email="m@example.com", subject="c", message="d", status=TicketStatus.CLOSED
        )

        resp = self.client.get(reverse("adminpanel:dashboard"))
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["providers"], 3)
        self.assertEqual(resp.data["pending_providers"], 1)
        self.assertEqual(resp.data["pending_properties"], 1)
        self.assertEqual(resp.data["pending_listings"], 1)
        self.assertEqual(resp.data["listings"], 2)
        self.assertEqual(resp.data["open_tickets"], 1)

    def test_non_admin_is_forbidden(self):
        self.client.force_authenticate(self.member)
        for url in (reverse("adminpanel:dashboard"), reverse("adminpanel:user-list")):
            self.assertEqual(self.client.get(url).status_code, status.HTTP_403_FORBIDDEN)

    def test_anonymous_is_rejected(self):
        self.client.force_authenticate(None)
        resp = self.client.get(reverse("adminpanel:dashboard"))
        self.assertIn(resp.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))


class ModerationTests(AdminPanelTestCase):
    def test_user_search_and_suspend(self):
        make_user("farah", first_name="Farah")
        resp = self.client.get(reverse("adminpanel:user-list"), {"search": "fara"})
        self.assertEqual([row["username"] for row in resp.data], ["farah"])

        resp = self.client.post(reverse("adminpanel:user-suspend", args=[self.member.pk]), {"suspended": True})
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["status"], "ok")
        self.member.refresh_from_db()
        self.assertTrue(self.member.is_suspended)

        resp = self.client.get(reverse("adminpanel:user-list"), {"status": "suspended"})
        self.assertEqual([row["username"] for row in resp.data], ["member"])

    def test_unknown_role_is_rejected(self):
        resp = self.client.post(reverse("adminpanel:user-role", args=[self.member.pk]), {"role": "overlord"})
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.data["status"], "error")

    def test_provider_approve_and_reject(self):
        provider = make_provider("builder", approved=False)
        resp = self.client.get(reverse("adminpanel:provider-list"), {"status": "pending"})
        self.assertEqual([row["id"] for row in resp.data], [provider.pk])

        resp = self.client.post(reverse("adminpanel:provider-approve", args=[provider.pk]))
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        provider.refresh_from_db()
        self.assertTrue(provider.is_approved)
        self.assertTrue(provider.approved)

        resp = self.client.post(reverse("adminpanel:provider-reject", args=[provider.pk]), {"reason": "Expired licence"})
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        provider = ServiceProvider.objects.get(pk=provider.pk)
        self.assertFalse(provider.is_approved)
        self.assertEqual(provider.rejected_reason, "Expired licence")

    def test_listing_approval_notifies_seller(self):
        listing = make_listing(seller=self.member, status=ListingStatus.PENDING)
        resp = self.client.post(reverse("adminpanel:listing-approve", args=[listing.pk]))
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["data"]["status"], ListingStatus.ACTIVE)
        self.assertTrue(Notification.objects.filter(user=self.member, title="Listing Approved").exists())

    def test_property_suspend(self):
        prop = make_property(owner=self.member)
        resp = self.client.post(reverse("adminpanel:property-suspend", args=[prop.pk]))
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        prop.refresh_from_db()
        self.assertEqual(prop.status, PropertyStatus.SUSPENDED)

    def test_requests_by_kind(self):
        prop = make_property(owner=self.admin)
        RentalRequest.objects.create(user=self.member, property=prop, landlord=self.admin, duration_months=12)
        resp = self.client.get(reverse("adminpanel:requests", args=["rental"]))
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(len(resp.data), 1)

        resp = self.client.get(reverse("adminpanel:requests", args=["lease"]))
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)


@override_settings(BROADCAST_CONFIRMATION_THRESHOLD=2, NOTIFICATION_BATCH_SIZE=2)
class BroadcastApiTests(AdminPanelTestCase):
    def setUp(self):
        super().setUp()
        for i in range(3):
            make_user(f"bulk{i}")

    def test_large_audience_needs_confirmation(self):
        url = reverse("adminpanel:broadcast-list")
        resp = self.client.post(url, {"title": "Maintenance", "message": "Down at 2am", "audience": "all-users"})
        self.assertEqual(resp.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(resp.data["code"], "confirmation_required")
        self.assertEqual(resp.data["data"]["total"], 5)
        job_id = resp.data["data"]["job_id"]
        self.assertEqual(Notification.objects.count(), 0)
        self.assertEqual(BroadcastJob.objects.get(pk=job_id).status, BroadcastStatus.AWAITING_CONFIRMATION)

        resp = self.client.post(reverse("adminpanel:broadcast-confirm", args=[job_id]))
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(Notification.objects.filter(title="Maintenance").count(), 5)

        resp = self.client.get(reverse("adminpanel:broadcast-detail", args=[job_id]))
        self.assertEqual(resp.data["sent"], 5)
        self.assertEqual(resp.data["total"], 5)

    def test_single_user_goes_straight_out(self):
        resp = self.client.post(
            reverse("adminpanel:broadcast-list"),
            {"title": "Hello", "message": "Welcome aboard", "audience": "single-uid", "single_uid": self.member.pk},
        )
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(list(Notification.objects.values_list("user_id", flat=True)), [self.member.pk])
