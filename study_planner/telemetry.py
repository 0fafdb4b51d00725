"""In-process telemetry for schedule generation and learner actions.

Events fan out to registered listeners (tests, host metrics) and are kept in
a short ring buffer so a host can show what the engine did recently. Each
event is also written as one ``TELEMETRY {...}`` log line.
"""

from __future__ import annotations

import json
import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from threading import RLock
from typing import Any, Callable, Deque, Dict, List, Optional

from pydantic import BaseModel

logger = logging.getLogger("study_planner.telemetry")

HISTORY_SIZE = 200


@dataclass(frozen=True)
class TelemetryEvent:
    name: str
    payload: Dict[str, Any]
    emitted_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


_listeners: List[Callable[[TelemetryEvent], None]] = []
_history: Deque[TelemetryEvent] = deque(maxlen=HISTORY_SIZE)
_lock = RLock()


def register_listener(listener: Callable[[TelemetryEvent], None]) -> None:
    with _lock:
        _listeners.append(listener)


def clear_listeners() -> None:
    """Drop listeners and history. Mainly used to reset test state."""
    with _lock:
        _listeners.clear()
        _history.clear()


def recent_events(name: Optional[str] = None, limit: int = 50) -> List[TelemetryEvent]:
    """Newest-first view of the buffered events, optionally filtered by name."""
    with _lock:
        events = [event for event in reversed(_history) if name is None or event.name == name]
    return events[: max(limit, 0)]


def emit_event(name: str, **fields: Any) -> None:
    payload = {key: _serialise(value) for key, value in fields.items()}
    event = TelemetryEvent(name=name, payload=payload)

    with _lock:
        _history.append(event)
        listeners = list(_listeners)

    for listener in listeners:
        try:
            listener(event)
        except Exception:  # noqa: BLE001
            logger.exception("Telemetry listener failed for %s", name)

    logger.info("TELEMETRY %s", json.dumps({"event": name, **payload}, default=str))


def _serialise(value: Any) -> Any:
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    return value


__all__ = [
    "TelemetryEvent",
    "clear_listeners",
    "emit_event",
    "recent_events",
    "register_listener",
]
