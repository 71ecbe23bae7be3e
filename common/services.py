"""
Service-layer plumbing: the call-boundary decorator and input validation helpers.

Every service operation is a single attempt. Domain errors propagate as they
are; anything else is logged and re-raised as a ``ServiceError`` carrying the
original message (or a "Failed to ..." default when that message is empty).
"""
import logging
from decimal import Decimal, InvalidOperation
from functools import wraps

from .exceptions import ServiceError, ValidationError

logger = logging.getLogger(__name__)


def service_call(default_message):
    """Wrap a service operation with the log-and-rethrow error policy.

    ``default_message`` may contain ``{label}``, filled from the bound service's
    ``label`` attribute when the wrapped callable is a method.
    """

    def decorator(func):
        @wraps(func)
        def _wrapped(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except ServiceError:
                raise
            except Exception as exc:
                message = default_message
                if "{label}" in message and args:
                    message = message.format(label=getattr(args[0], "label", "record"))
                logger.exception("%s: %s", func.__qualname__, message)
                raise ServiceError(str(exc) or message) from exc

        return _wrapped

    return decorator


def _is_blank(value):
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def require_fields(data, fields):
    """Raise ValidationError naming every missing field."""
    missing = [field for field in fields if _is_blank((data or {}).get(field))]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")


def coerce_amount(value, field="amount", *, positive=True):
    """Coerce a numeric input (str/int/float/Decimal) to Decimal."""
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number")
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"{field} must be a number")
    if not amount.is_finite():
        raise ValidationError(f"{field} must be a number")
    if positive and amount <= 0:
        raise ValidationError(f"{field} must be greater than 0")
    return amount


def clean_text(value, max_len=None):
    text = (value or "").replace("\r\n", "\n").replace("\r", "\n").strip()
    if max_len and len(text) > max_len:
        text = text[:max_len]
    return text
