"""Domain event constants and publisher.

Events are logged and kept in a bounded in-process buffer so tests and the
debug route can observe what the schema store and submission flow emitted.
"""

from __future__ import annotations

from collections import deque
from typing import Any, Deque, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)

SCHEMA_LOADED = "schema.loaded"
SCHEMA_RELOADED = "schema.reloaded"
SCHEMA_LOAD_FAILED = "schema.load_failed"
SUBMISSION_CREATED = "submission.created"
SUBMISSION_REJECTED = "submission.rejected"

EVENT_BUFFER_SIZE = 500

EVENT_BUFFER: Deque[Dict[str, Any]] = deque(maxlen=EVENT_BUFFER_SIZE)


def publish(event_type: str, payload: Dict[str, Any]) -> None:
    logger.info("event_publish type=%s payload=%s", event_type, payload)
    EVENT_BUFFER.append({"type": event_type, "payload": payload})


def get_buffered_events(event_type: Optional[str] = None, clear: bool = True) -> List[Dict[str, Any]]:
    """Return buffered events, optionally only those of `event_type`.

    With `clear`, the whole buffer is emptied, not only the returned events.
    """
    events = [e for e in EVENT_BUFFER if event_type is None or e["type"] == event_type]
    if clear:
        EVENT_BUFFER.clear()
    return events


__all__ = [
    "SCHEMA_LOADED",
    "SCHEMA_RELOADED",
    "SCHEMA_LOAD_FAILED",
    "SUBMISSION_CREATED",
    "SUBMISSION_REJECTED",
    "publish",
    "get_buffered_events",
    "EVENT_BUFFER",
]
