"""
Base class for request-like services (rental, buy/sell, construction, renovation).

Subclasses supply the model, the status workflow and a lookup table of
notification texts; the base implements the read operations and the
``update_status`` sequence: re-read, check the transition, write status and
timestamp with a history entry, then notify best-effort and push the change
to live listeners.
"""
import logging
from typing import Dict, NamedTuple, Optional

from django.db import transaction

from notifications import dispatch

from .exceptions import NotFound
from .models import RequestUpdate
from .queries import fetch_ordered
from .realtime import push_event, user_group
from .services import clean_text, service_call

logger = logging.getLogger(__name__)


class StatusNotice(NamedTuple):
    """Notification text for one status: title, sentence template and tone."""
    title: str
    message: str
    tone: str = "info"


class RequestService:
    model = None
    workflow = None
    label = "request"
    requester_link = "/dashboard"
    counterpart_link = "/dashboard"
    # Statuses announced to the requester
    status_notices: Dict[str, StatusNotice] = {}
    # Statuses announced to the provider/owner on the other side of the request
    counterpart_notices: Dict[str, StatusNotice] = {}

    def get_queryset(self):
        return self.model.objects.all()

    # Reads

    @service_call("Failed to fetch {label}")
    def get_by_id(self, request_id):
        try:
            return self.get_queryset().get(pk=request_id)
        except (self.model.DoesNotExist, ValueError, TypeError):
            raise NotFound(f"{self.label.capitalize()} not found")

    @service_call("Failed to fetch {label}s")
    def get_by_user(self, user_id):
        return fetch_ordered(self.get_queryset().filter(user_id=user_id), "-created_at")

    @service_call("Failed to fetch {label}s")
    def get_all(self):
        return fetch_ordered(self.get_queryset(), "-created_at")

    @service_call("Failed to delete {label}")
    def delete(self, request_id):
        with transaction.atomic():
            deleted, _ = self.model.objects.filter(pk=request_id).delete()
            if not deleted:
                raise NotFound(f"{self.label.capitalize()} not found")
            self._history(request_id).delete()
        logger.info("%s %s deleted", self.label, request_id)

    # History

    def _history(self, request_id):
        return RequestUpdate.objects.filter(kind=self.model._meta.model_name, object_id=request_id)

    def record_update(self, obj, status, updated_by=None, note=""):
        return RequestUpdate.objects.create(
            kind=self.model._meta.model_name,
            object_id=obj.pk,
            status=status,
            updated_by_id=updated_by,
            note=clean_text(note, 1000),
        )

    @service_call("Failed to fetch {label} updates")
    def get_updates(self, request_id):
        """Status history of one request, oldest first."""
        return fetch_ordered(self._history(request_id), "created_at", "id")

    # Status workflow

    def counterpart_id(self, obj) -> Optional[int]:
        """User id on the other side of the request (provider or owner)."""
        return None

    def message_context(self, obj) -> dict:
        return {"label": self.label}

    def apply_status(self, obj, status, **context):
        """Hook run inside the write transaction; returns extra fields to save."""
        return []

    def link_for(self, obj, status, audience):
        return self.requester_link if audience == "requester" else self.counterpart_link

    @service_call("Failed to update {label}")
    def update_status(self, request_id, status, updated_by=None, note="", **context):
        """Move the request to ``status``.

        ``updated_by`` and ``note`` go into the history entry; the remaining
        context is handed to ``apply_status``.
        """
        with transaction.atomic():
            try:
                obj = self.model.objects.select_for_update().get(pk=request_id)
            except (self.model.DoesNotExist, ValueError, TypeError):
                raise NotFound(f"{self.label.capitalize()} not found")
            previous = obj.status
            target = self.workflow.check(previous, status)
            extra_fields = list(self.apply_status(obj, target, **context) or [])
            obj.status = target
            obj.save(update_fields=["status", "updated_at", *extra_fields])
            self.record_update(obj, target, updated_by, note or context.get("progress_note", ""))
        logger.info("%s %s: %s -> %s", self.label, obj.pk, previous, target)
        self.announce_status(obj, target)
        return obj

    def announce_status(self, obj, status):
        """Notify the requester (always) and the counterpart (when relevant)."""
        ctx = self.message_context(obj)
        notice = self.status_notices.get(status)
        if notice:
            dispatch.notify(
                obj.user_id,
                notice.title,
                notice.message.format(**ctx),
                notice.tone,
                self.link_for(obj, status, "requester"),
            )
        counterpart = self.counterpart_id(obj)
        counterpart_notice = self.counterpart_notices.get(status)
        if counterpart and counterpart_notice and counterpart != obj.user_id:
            dispatch.notify(
                counterpart,
                counterpart_notice.title,
                counterpart_notice.message.format(**ctx),
                counterpart_notice.tone,
                self.link_for(obj, status, "counterpart"),
            )
        push_event(
            user_group(obj.user_id),
            "request_status_event",
            {"kind": self.model._meta.model_name, "id": obj.pk, "status": status},
        )
