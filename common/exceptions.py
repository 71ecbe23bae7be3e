"""
Domain error taxonomy shared by every service module.

Views never see raw database errors: services raise one of these and the DRF
exception handler in ``common.views`` turns it into a single toast message.
"""
from django.db import DatabaseError


class ServiceError(Exception):
    """Store or connectivity failure, carrying the original message."""

    default_message = "Request failed"
    code = "service_error"
    status_code = 500

    def __init__(self, message=None):
        self.message = str(message or self.default_message)
        super().__init__(self.message)


class ValidationError(ServiceError):
    """Required-field or range check failed before any write."""

    default_message = "Invalid input"
    code = "validation_error"
    status_code = 400


class NotFound(ServiceError):
    default_message = "Not found"
    code = "not_found"
    status_code = 404


class InvalidTransition(ValidationError):
    """A status write that the domain workflow does not allow."""

    code = "invalid_transition"
    status_code = 409


class DuplicateReview(ValidationError):
    default_message = "You have already reviewed this item"
    code = "duplicate_review"
    status_code = 409


class ConfirmationRequired(ServiceError):
    """A bulk send is above the confirmation threshold and was not confirmed."""

    default_message = "Confirmation required"
    code = "confirmation_required"
    status_code = 409

    def __init__(self, message=None, *, job_id=None, total=0):
        super().__init__(message)
        self.job_id = job_id
        self.total = total


class IndexMissingError(DatabaseError):
    """The backing store cannot serve the requested ordering without an index."""
