"""
Construction and renovation request services.

``create`` notifies the requester once and then either the selected provider
or, when none was selected, every approved provider of the matching service
type through ``fan_out``. Accepting a request assigns the provider and opens
(or finds) their 1:1 conversation best-effort.
"""
import logging
from datetime import date

from accounts.models import ServiceProvider, ServiceType
from accounts.services import approved_provider_user_ids
from chat.services import get_or_create_conversation
from common.exceptions import ValidationError
from common.models import DeadLetterKind
from common.queries import fetch_ordered, sort_records
from common.request_service import RequestService, StatusNotice
from common.services import clean_text, coerce_amount, require_fields, service_call
from common.side_effects import best_effort
from notifications import dispatch
from notifications.models import NotificationType

from .models import PROJECT_WORKFLOW, ConstructionRequest, ProjectStatus, RenovationRequest

logger = logging.getLogger(__name__)


def _parse_date(value, field):
    if not value:
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        raise ValidationError(f"{field} must be a date (YYYY-MM-DD)")


def _open_conversation(user_id, provider_id):
    """Conversation id for the pair, or None when it could not be opened."""
    result = best_effort(DeadLetterKind.CHAT, get_or_create_conversation, user_id, provider_id)
    return result[0].pk if result else None


class ContractingRequestService(RequestService):
    service_type = None
    title_word = ""
    provider_link = "/provider/requests"
    required_fields = ()
    opens_chat_on_create = False

    def build(self, data):
        raise NotImplementedError

    def message_context(self, obj):
        note = obj.progress_note.strip()
        return {"label": self.label, "subject": obj.subject, "note": f" {note}" if note else ""}

    def counterpart_id(self, obj):
        return obj.provider_id

    def link_for(self, obj, status, audience):
        if audience == "requester" and status == ProjectStatus.ACCEPTED and obj.conversation_id:
            return f"/chats?chatId={obj.conversation_id}"
        return super().link_for(obj, status, audience)

    def _check_provider(self, provider_id):
        if not ServiceProvider.objects.filter(
            user_id=provider_id, service_type=self.service_type, is_approved=True
        ).exists():
            raise ValidationError(f"Selected provider is not an approved {self.service_type} provider")

    @service_call("Failed to create {label}")
    def create(self, data):
        require_fields(data, ["user_id", *self.required_fields, "budget"])
        provider_id = data.get("provider_id") or None
        if provider_id:
            self._check_provider(provider_id)
        obj = self.build(data)
        obj.user_id = data["user_id"]
        obj.provider_id = provider_id
        obj.property_id = data.get("property_id") or None
        obj.budget = coerce_amount(data.get("budget"), "budget")
        obj.status = ProjectStatus.PENDING
        obj.save()
        self.record_update(obj, obj.status, obj.user_id)
        logger.info("%s %s created by %s (provider=%s)", self.label, obj.pk, obj.user_id, provider_id)

        subject = obj.subject
        dispatch.notify(
            obj.user_id,
            f"{self.title_word} Request Submitted",
            f"Your {subject} request has been submitted successfully. We'll notify you when a provider responds.",
            NotificationType.SERVICE_REQUEST,
            self.requester_link,
        )
        if provider_id:
            if self.opens_chat_on_create:
                conversation_id = _open_conversation(obj.user_id, provider_id)
                if conversation_id:
                    obj.conversation_id = conversation_id
                    obj.save(update_fields=["conversation", "updated_at"])
            dispatch.notify(
                provider_id,
                f"New {self.title_word} Request",
                f"You have received a new {subject} request. Check your dashboard for details.",
                NotificationType.SERVICE_REQUEST,
                self.provider_link,
            )
        else:
            recipients = [uid for uid in approved_provider_user_ids(self.service_type) if uid != obj.user_id]
            dispatch.fan_out(
                recipients,
                f"New {self.title_word} Request Available",
                f"A new {subject} request is available. Check available projects.",
                NotificationType.SERVICE_REQUEST,
                self.provider_link,
            )
        return obj

    @service_call("Failed to fetch {label}s")
    def get_by_provider(self, provider_id):
        """Requests assigned to the provider plus unassigned pending ones, newest first."""
        assigned = fetch_ordered(self.get_queryset().filter(provider_id=provider_id), "-created_at")
        open_requests = fetch_ordered(
            self.get_queryset().filter(provider__isnull=True, status=ProjectStatus.PENDING), "-created_at"
        )
        for row in assigned:
            row.is_assigned = True
        for row in open_requests:
            row.is_assigned = False
        return sort_records(assigned + open_requests, ["-created_at"])

    def apply_status(self, obj, status, provider_id=None, progress_note="", **context):
        fields = []
        if status == ProjectStatus.ACCEPTED:
            provider_id = int(provider_id or obj.provider_id or 0)
            if not provider_id:
                raise ValidationError("A provider is required to accept this request")
            if provider_id != obj.provider_id:
                self._check_provider(provider_id)
                obj.provider_id = provider_id
                fields.append("provider")
            conversation_id = _open_conversation(obj.user_id, provider_id)
            if conversation_id and conversation_id != obj.conversation_id:
                obj.conversation_id = conversation_id
                fields.append("conversation")
        note = clean_text(progress_note, 1000)
        if note:
            obj.progress_note = note
            fields.append("progress_note")
        return fields


def _project_notices(word):
    return {
        ProjectStatus.CONFIRMED: StatusNotice(
            f"{word} Request Confirmed", "Your {subject} request has been confirmed.", NotificationType.INFO
        ),
        ProjectStatus.ACCEPTED: StatusNotice(
            f"{word} Request Accepted",
            "Your {subject} request has been accepted! You can now chat with the provider.",
            NotificationType.SUCCESS,
        ),
        ProjectStatus.REJECTED: StatusNotice(
            f"{word} Request Rejected", "Your {subject} request has been rejected.", NotificationType.ERROR
        ),
        ProjectStatus.IN_PROGRESS: StatusNotice(
            f"{word} Project Started", "Your {subject} project is now in progress.{note}", NotificationType.INFO
        ),
        ProjectStatus.COMPLETED: StatusNotice(
            f"{word} Project Completed", "Your {subject} project has been marked as completed.", NotificationType.SUCCESS
        ),
    }


def _provider_notices(word):
    return {
        ProjectStatus.CONFIRMED: StatusNotice(
            f"{word} Request Confirmed", "Payment for the {subject} request has been confirmed.", NotificationType.INFO
        ),
        ProjectStatus.ACCEPTED: StatusNotice(
            f"{word} Request Assigned", "The {subject} request is now assigned to you.", NotificationType.SUCCESS
        ),
    }


class ConstructionRequestService(ContractingRequestService):
    model = ConstructionRequest
    workflow = PROJECT_WORKFLOW
    label = "construction request"
    service_type = ServiceType.CONSTRUCTION
    title_word = "Construction"
    required_fields = ("project_type", "description")
    provider_link = "/provider-construction-panel"
    status_notices = _project_notices("Construction")
    counterpart_notices = _provider_notices("Construction")

    def build(self, data):
        start = _parse_date(data.get("start_date"), "start_date")
        end = _parse_date(data.get("end_date"), "end_date")
        if start and end and end < start:
            raise ValidationError("end_date cannot be before start_date")
        return ConstructionRequest(
            project_type=clean_text(data.get("project_type"), 120),
            description=clean_text(data.get("description"), 4000),
            start_date=start,
            end_date=end,
        )


class RenovationRequestService(ContractingRequestService):
    model = RenovationRequest
    workflow = PROJECT_WORKFLOW
    label = "renovation request"
    service_type = ServiceType.RENOVATION
    title_word = "Renovation"
    required_fields = ("service_category", "detailed_description")
    provider_link = "/provider-renovation-panel"
    opens_chat_on_create = True
    status_notices = _project_notices("Renovation")
    counterpart_notices = _provider_notices("Renovation")

    def build(self, data):
        photos = data.get("photos") or []
        if isinstance(photos, str):
            photos = [photos]
        return RenovationRequest(
            service_category=clean_text(data.get("service_category"), 120),
            detailed_description=clean_text(data.get("detailed_description"), 4000),
            preferred_date=_parse_date(data.get("preferred_date") or data.get("start_date"), "preferred_date"),
            photos=[str(url) for url in photos][:20],
        )


construction_requests = ConstructionRequestService()
renovation_requests = RenovationRequestService()
