"""Schedule generation engine for personal study plans."""

from .agenda import DaySummary, day_summary, late_items, next_item
from .durations import effective_duration, exam_duration, goal_duration, review_duration
from .grouping import group_schedule_items, review_label
from .scheduler import (
    AllocatorState,
    ScheduleEngine,
    ScheduleRequest,
    build_request_for_learner,
    generate_schedule,
    generate_schedule_for_request,
)

__all__ = [
    "AllocatorState",
    "DaySummary",
    "ScheduleEngine",
    "ScheduleRequest",
    "build_request_for_learner",
    "day_summary",
    "effective_duration",
    "exam_duration",
    "generate_schedule",
    "generate_schedule_for_request",
    "goal_duration",
    "group_schedule_items",
    "late_items",
    "next_item",
    "review_duration",
    "review_label",
]
