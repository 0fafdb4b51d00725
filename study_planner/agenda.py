"""Read-only views over a generated schedule used by the dashboard."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from .dates import iso_key, weekday_name
from .grouping import group_schedule_items
from .models import GroupedItem, Routine, Schedule, ScheduledItem


@dataclass
class DaySummary:
    day: date
    routine_minutes: int
    planned_minutes: int
    groups: List[GroupedItem]

    @property
    def all_completed(self) -> bool:
        return bool(self.groups) and all(group.completed for group in self.groups)

    @property
    def overflow_minutes(self) -> int:
        return max(self.planned_minutes - self.routine_minutes, 0)


def late_items(schedule: Schedule, today: date) -> List[ScheduledItem]:
    """Uncompleted items dated before ``today``, oldest first."""
    cutoff = iso_key(today)
    late: List[ScheduledItem] = []
    for key in sorted(schedule):
        if key >= cutoff:
            break
        late.extend(item for item in schedule[key] if not item.completed)
    return late


def next_item(schedule: Schedule, today: date) -> Optional[ScheduledItem]:
    cutoff = iso_key(today)
    for key in sorted(schedule):
        if key > cutoff and schedule[key]:
            return schedule[key][0]
    return None


def day_summary(schedule: Schedule, day: date, routine: Routine) -> DaySummary:
    items = schedule.get(iso_key(day), [])
    return DaySummary(
        day=day,
        routine_minutes=routine.minutes_for(weekday_name(day)),
        planned_minutes=sum(item.duration for item in items),
        groups=group_schedule_items(items),
    )


__all__ = ["DaySummary", "day_summary", "late_items", "next_item"]
