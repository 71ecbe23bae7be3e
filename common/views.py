"""
JSON response helpers and the REST framework exception handler.

Every error reaching a client is rendered in the toast shape
``{"status": "error", "message": ..., "code": ...}`` with exactly one
human-readable message.
"""
import logging

from django.http import JsonResponse
from rest_framework import status as http_status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler

from .exceptions import ConfirmationRequired, ServiceError

logger = logging.getLogger(__name__)


def json_error(message, status=400, code=None, field_errors=None):
    """Standard JSON error shape consumed by the frontend toast handler."""
    payload = {"status": "error", "message": str(message)}
    if code is not None:
        payload["code"] = code
    if field_errors:
        payload["field_errors"] = field_errors
    return JsonResponse(payload, status=status)


def json_ok(message="Success", data=None, status=200):
    """Standard JSON success shape consumed by the frontend toast handler."""
    payload = {"status": "ok", "message": str(message)}
    if data is not None:
        payload["data"] = data
    return JsonResponse(payload, status=status)


def ok(message="Success", data=None, status=http_status.HTTP_200_OK):
    """DRF flavour of ``json_ok`` for viewsets."""
    payload = {"status": "ok", "message": str(message)}
    if data is not None:
        payload["data"] = data
    return Response(payload, status=status)


def _first_message(detail):
    if isinstance(detail, dict):
        for key, value in detail.items():
            message = _first_message(value)
            if message:
                return message if key == "non_field_errors" else f"{key}: {message}"
        return ""
    if isinstance(detail, (list, tuple)):
        for item in detail:
            message = _first_message(item)
            if message:
                return message
        return ""
    return str(detail)


def service_exception_handler(exc, context):
    """Render domain and DRF errors as a single toast message."""
    if isinstance(exc, ServiceError):
        payload = {"status": "error", "message": exc.message, "code": exc.code}
        if isinstance(exc, ConfirmationRequired):
            payload["data"] = {"job_id": exc.job_id, "total": exc.total}
        if exc.status_code >= 500:
            view = context.get("view")
            logger.error("%s failed: %s", type(view).__name__ if view else "view", exc.message)
        return Response(payload, status=exc.status_code)

    response = exception_handler(exc, context)
    if response is None:
        return None
    code = getattr(exc, "default_code", None) if isinstance(exc, APIException) else None
    field_errors = response.data if isinstance(response.data, dict) and "detail" not in response.data else None
    response.data = {
        "status": "error",
        "message": _first_message(response.data) or "Request failed",
        "code": code,
    }
    if field_errors:
        response.data["field_errors"] = field_errors
    return response


def request_payload(request, **extra):
    """Plain dict of the request body (JSON or form), merged with ``extra``."""
    data = request.data
    data = data.dict() if hasattr(data, "dict") else dict(data or {})
    data.update(extra)
    return data


def health(request):
    return json_ok("ok")


def not_found(request, exception=None):
    return json_error("Not found", status=404, code="not_found")


def server_error(request):
    return json_error("Internal server error", status=500, code="server_error")
