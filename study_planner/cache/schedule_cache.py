"""Process-local memoization boundary around the schedule generator.

The generator itself is stateless. The host keeps one cached schedule per
learner together with a fingerprint of the request that produced it and only
re-runs the allocator when the fingerprint changes.
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from threading import RLock
from typing import Callable, Dict, Optional

from ..config import get_settings
from ..models import Schedule
from ..scheduler import ScheduleRequest, generate_schedule_for_request
from ..telemetry import emit_event

logger = logging.getLogger(__name__)


def _normalize_key(user_id: str) -> str:
    normalized = user_id.strip().lower()
    if not normalized:
        raise ValueError("User id cannot be empty when caching schedules.")
    return normalized


def schedule_fingerprint(request: ScheduleRequest) -> str:
    payload = request.model_dump_json()
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def _copy_schedule(schedule: Schedule) -> Schedule:
    return {key: [item.model_copy(deep=True) for item in items] for key, items in schedule.items()}


@dataclass
class _ScheduleEntry:
    fingerprint: str
    schedule: Schedule
    cached_at: datetime


class ScheduleCache:
    """Per-learner cache keyed by the fingerprint of the last request."""

    def __init__(self, max_entries: Optional[int] = None) -> None:
        self._entries: Dict[str, _ScheduleEntry] = {}
        self._max_entries = max_entries
        self._lock = RLock()

    def get(self, user_id: str, request: ScheduleRequest) -> Optional[Schedule]:
        key = _normalize_key(user_id)
        fingerprint = schedule_fingerprint(request)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None or entry.fingerprint != fingerprint:
                return None
            return _copy_schedule(entry.schedule)

    def set(self, user_id: str, request: ScheduleRequest, schedule: Schedule) -> None:
        key = _normalize_key(user_id)
        entry = _ScheduleEntry(
            fingerprint=schedule_fingerprint(request),
            schedule=_copy_schedule(schedule),
            cached_at=datetime.now(timezone.utc),
        )
        limit = self._max_entries or get_settings().cache_max_entries
        with self._lock:
            self._entries.pop(key, None)
            self._entries[key] = entry
            while len(self._entries) > limit:
                oldest = next(iter(self._entries))
                self._entries.pop(oldest)
                logger.debug("Evicted cached schedule for %s", oldest)

    def get_or_generate(
        self,
        user_id: str,
        request: ScheduleRequest,
        generator: Callable[[ScheduleRequest], Schedule] = generate_schedule_for_request,
    ) -> Schedule:
        if not get_settings().cache_enabled:
            return generator(request)
        cached = self.get(user_id, request)
        emit_event("schedule_cache", user_id=user_id, plan_id=request.plan.id, hit=cached is not None)
        if cached is not None:
            return cached
        schedule = generator(request)
        self.set(user_id, request, schedule)
        return schedule

    def invalidate(self, user_id: str) -> None:
        key = _normalize_key(user_id)
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


schedule_cache = ScheduleCache()

__all__ = ["ScheduleCache", "schedule_cache", "schedule_fingerprint"]
