from django.contrib.auth import get_user_model
from django.test import TestCase

from common.exceptions import ServiceError, ValidationError
from common.models import DeadLetter, DeadLetterKind
from common.services import coerce_amount, require_fields, service_call
from common.side_effects import best_effort
from common.test_factories import make_user


class BestEffortTests(TestCase):
    def test_success_returns_value(self):
        self.assertEqual(best_effort(DeadLetterKind.CHAT, lambda: 42), 42)
        self.assertFalse(DeadLetter.objects.exists())

    def test_failure_is_dead_lettered_and_rolled_back(self):
        def create_then_fail():
            make_user("ghost")
            raise RuntimeError("store unavailable")

        self.assertIsNone(best_effort(DeadLetterKind.NOTIFICATION, create_then_fail))
        self.assertFalse(get_user_model().objects.filter(username="ghost").exists())
        letter = DeadLetter.objects.get()
        self.assertEqual(letter.kind, DeadLetterKind.NOTIFICATION)
        self.assertIn("store unavailable", letter.error)


class ServiceCallTests(TestCase):
    def test_domain_errors_pass_through(self):
        @service_call("Failed to do thing")
        def op():
            raise ValidationError("title is required")

        with self.assertRaisesMessage(ValidationError, "title is required"):
            op()

    def test_other_errors_become_service_errors(self):
        @service_call("Failed to do thing")
        def op():
            raise KeyError()

        with self.assertRaises(ServiceError) as ctx:
            op()
        self.assertNotIsInstance(ctx.exception, ValidationError)

    def test_empty_message_uses_default(self):
        @service_call("Failed to do thing")
        def op():
            raise RuntimeError("")

        with self.assertRaisesMessage(ServiceError, "Failed to do thing"):
            op()

    def test_validation_helpers(self):
        with self.assertRaisesMessage(ValidationError, "Missing required fields: title, price"):
            require_fields({"title": "  ", "city": "Lahore"}, ["title", "price", "city"])
        with self.assertRaises(ValidationError):
            coerce_amount("0", "amount")
        with self.assertRaises(ValidationError):
            coerce_amount("abc", "amount")
        self.assertEqual(str(coerce_amount("50000", "amount")), "50000")
