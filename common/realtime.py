"""
Push helpers for live listeners.

Dashboards and notification badges subscribe to channel-layer groups; writers
push a small event after each change instead of clients polling.
"""
import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer

logger = logging.getLogger(__name__)


def user_group(user_id) -> str:
    return f"user_{user_id}"


def push_event(group, event_type, data):
    """Send ``data`` to every consumer in ``group``; failures are logged only."""
    layer = get_channel_layer()
    if layer is None:
        return False
    try:
        async_to_sync(layer.group_send)(group, {"type": event_type, "data": data})
    except Exception:
        logger.warning("push_event: could not deliver %s to %s", event_type, group, exc_info=True)
        return False
    return True
