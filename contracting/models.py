"""
Construction and renovation service requests.

Both start unassigned or addressed to one provider (a user with an approved
provider profile). Accepting assigns the provider and links the 1:1
conversation between requester and provider.
"""
from django.conf import settings
from django.db import models

from common.models import TimeStampedModel
from common.workflow import StatusWorkflow


class ProjectStatus(models.TextChoices):
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    ACCEPTED = "Accepted"
    REJECTED = "Rejected"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"


PROJECT_WORKFLOW = StatusWorkflow(
    "service request",
    {
        ProjectStatus.PENDING: [ProjectStatus.ACCEPTED, ProjectStatus.REJECTED, ProjectStatus.CONFIRMED],
        ProjectStatus.CONFIRMED: [ProjectStatus.ACCEPTED, ProjectStatus.REJECTED],
        ProjectStatus.ACCEPTED: [ProjectStatus.IN_PROGRESS],
        ProjectStatus.IN_PROGRESS: [ProjectStatus.COMPLETED],
    },
    aliases={"Approved": ProjectStatus.ACCEPTED},
)


class ServiceRequest(TimeStampedModel):
    # Declared before the ``property`` field, which shadows the builtin below
    @property
    def subject(self) -> str:
        raise NotImplementedError

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="+")
    provider = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )
    property = models.ForeignKey(
        "properties.Property", on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )
    budget = models.DecimalField(max_digits=14, decimal_places=2)
    status = models.CharField(max_length=16, choices=ProjectStatus.choices, default=ProjectStatus.PENDING, db_index=True)
    conversation = models.ForeignKey(
        "chat.Conversation", on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )
    progress_note = models.TextField(blank=True)

    class Meta:
        abstract = True
        ordering = ["-created_at"]


class ConstructionRequest(ServiceRequest):
    project_type = models.CharField(max_length=120)
    description = models.TextField()
    start_date = models.DateField(null=True, blank=True)
    end_date = models.DateField(null=True, blank=True)

    class Meta(ServiceRequest.Meta):
        indexes = [
            models.Index(fields=["provider", "status"], name="idx_construction_provider"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"Construction request #{self.id} ({self.status})"

    @property
    def subject(self) -> str:
        return self.project_type


class RenovationRequest(ServiceRequest):
    service_category = models.CharField(max_length=120)
    detailed_description = models.TextField()
    preferred_date = models.DateField(null=True, blank=True)
    photos = models.JSONField(default=list, blank=True)

    class Meta(ServiceRequest.Meta):
        indexes = [
            models.Index(fields=["provider", "status"], name="idx_renovation_provider"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"Renovation request #{self.id} ({self.status})"

    @property
    def subject(self) -> str:
        return self.service_category
