from django.test import SimpleTestCase

from common.exceptions import InvalidTransition, ValidationError
from contracting.models import PROJECT_WORKFLOW, ProjectStatus
from properties.models import RENTAL_WORKFLOW, RentalStatus


class StatusWorkflowTests(SimpleTestCase):
    def test_legacy_approved_maps_to_accepted(self):
        self.assertEqual(RENTAL_WORKFLOW.normalize("Approved"), RentalStatus.ACCEPTED)

    def test_unknown_status_is_rejected(self):
        with self.assertRaises(ValidationError):
            RENTAL_WORKFLOW.normalize("Teleported")

    def test_terminal_states_have_no_targets(self):
        self.assertTrue(PROJECT_WORKFLOW.is_terminal(ProjectStatus.COMPLETED))
        self.assertTrue(PROJECT_WORKFLOW.is_terminal(ProjectStatus.REJECTED))
        self.assertEqual(PROJECT_WORKFLOW.allowed_targets(ProjectStatus.COMPLETED), frozenset())

    def test_check_allows_forward_moves(self):
        self.assertEqual(
            PROJECT_WORKFLOW.check(ProjectStatus.ACCEPTED, ProjectStatus.IN_PROGRESS), ProjectStatus.IN_PROGRESS
        )

    def test_check_blocks_moves_out_of_terminal_state(self):
        with self.assertRaises(InvalidTransition):
            RENTAL_WORKFLOW.check(RentalStatus.REJECTED, RentalStatus.ACCEPTED)
        with self.assertRaises(InvalidTransition):
            PROJECT_WORKFLOW.check(ProjectStatus.COMPLETED, ProjectStatus.PENDING)
