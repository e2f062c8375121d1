"""Domain event constants and publisher.

Defines event type constants and a simple publish() callable used by the
submit and clear flows. Events are logged for observability and kept in a
bounded in-process buffer for inspection.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Any, Deque, Dict, List

logger = logging.getLogger(__name__)

SUBMISSION_CREATED = "submission.created"
FORM_CLEARED = "form.cleared"

EVENT_BUFFER_SIZE = 1000

EVENT_BUFFER: Deque[Dict[str, Any]] = deque(maxlen=EVENT_BUFFER_SIZE)


def publish(event_type: str, payload: Dict[str, Any]) -> None:
    logger.info("event_publish type=%s payload=%s", event_type, payload)
    EVENT_BUFFER.append({"type": event_type, "payload": payload})


def get_buffered_events(clear: bool = True) -> List[Dict[str, Any]]:
    """Return buffered domain events; optionally clear the buffer."""
    events = list(EVENT_BUFFER)
    if clear:
        EVENT_BUFFER.clear()
    return events


__all__ = [
    "SUBMISSION_CREATED",
    "FORM_CLEARED",
    "publish",
    "get_buffered_events",
    "EVENT_BUFFER",
]
