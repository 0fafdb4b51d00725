"""In-memory memoization of generated schedules."""

from .schedule_cache import ScheduleCache, schedule_cache, schedule_fingerprint

__all__ = ["ScheduleCache", "schedule_cache", "schedule_fingerprint"]
