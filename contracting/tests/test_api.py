from django.urls import reverse
from rest_framework.test import APITestCase

from common.test_factories import make_provider, make_user
from contracting.models import ProjectStatus
from contracting.services import construction_requests
from contracting.tests.test_services import construction_payload


class ServiceRequestApiTests(APITestCase):
    def setUp(self):
        self.customer = make_user("customer")
        self.builder = make_provider("builder").user
        self.open_request = construction_requests.create(construction_payload(self.customer))

    def _status_url(self, obj):
        return reverse("contracting:construction-set-status", args=[obj.pk])

    def test_open_request_can_only_be_accepted_by_other_providers(self):
        self.client.force_authenticate(self.builder)
        for target in ("Rejected", "Confirmed"):
            resp = self.client.post(self._status_url(self.open_request), {"status": target}, format="json")
            self.assertEqual(resp.status_code, 403)
        self.open_request.refresh_from_db()
        self.assertEqual(self.open_request.status, ProjectStatus.PENDING)

        resp = self.client.post(self._status_url(self.open_request), {"status": "Accepted"}, format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["status"], ProjectStatus.ACCEPTED)
        self.assertEqual(resp.data["provider"], self.builder.pk)

    def test_addressed_provider_may_reject(self):
        addressed = construction_requests.create(construction_payload(self.customer, provider_id=self.builder.pk))
        self.client.force_authenticate(self.builder)
        resp = self.client.post(self._status_url(addressed), {"status": "Rejected"}, format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["status"], ProjectStatus.REJECTED)

    def test_updates_lists_history_to_participants(self):
        self.client.force_authenticate(self.builder)
        self.client.post(
            self._status_url(self.open_request), {"status": "Accepted", "progress_note": "Site visit Monday"}, format="json"
        )
        url = reverse("contracting:construction-updates", args=[self.open_request.pk])
        self.client.force_authenticate(self.customer)
        resp = self.client.get(url)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual([row["status"] for row in resp.data], [ProjectStatus.PENDING, ProjectStatus.ACCEPTED])
        self.assertEqual(resp.data[1]["updated_by"], self.builder.pk)
        self.assertEqual(resp.data[1]["note"], "Site visit Monday")

        self.client.force_authenticate(make_user("stranger"))
        self.assertEqual(self.client.get(url).status_code, 403)
