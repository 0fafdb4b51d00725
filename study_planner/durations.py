"""Effective time cost of study units for a learner's level and study mode."""

from __future__ import annotations

import math
from typing import Any, Dict

from .models import Exam, Goal, GoalType, UserLevel

MIN_DURATION_MINUTES = 10
MIN_REVIEW_MINUTES = 10
REVIEW_SHARE = 0.2
SEMI_ACTIVE_FACTOR = 2
EXAM_MINUTES_PER_QUESTION = 3

LEVEL_MULTIPLIERS: Dict[UserLevel, float] = {
    UserLevel.BEGINNER: 1.0,
    UserLevel.INTERMEDIATE: 0.75,
    UserLevel.ADVANCED: 0.50,
}

# Minutes per page; already level specific, so the level multiplier is not applied on top.
PAGE_RATES: Dict[GoalType, Dict[UserLevel, int]] = {
    GoalType.MATERIAL: {UserLevel.BEGINNER: 5, UserLevel.INTERMEDIATE: 3, UserLevel.ADVANCED: 1},
    GoalType.PRACTICE_QUESTIONS: {UserLevel.BEGINNER: 10, UserLevel.INTERMEDIATE: 6, UserLevel.ADVANCED: 2},
    GoalType.STATUTE_READING: {UserLevel.BEGINNER: 5, UserLevel.INTERMEDIATE: 3, UserLevel.ADVANCED: 1},
}


def _coerce_minutes(value: Any) -> float:
    if isinstance(value, bool):
        return 0.0
    try:
        minutes = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(minutes) or math.isinf(minutes):
        return 0.0
    return minutes


def _finalize(minutes: float) -> int:
    if minutes <= 0:
        return MIN_DURATION_MINUTES
    return math.ceil(minutes)


def effective_duration(base_minutes: Any, level: UserLevel, semi_active: bool = False) -> int:
    """Scale ``base_minutes`` by proficiency, doubling afterwards in semi-active mode.

    The result is rounded up to a whole minute. Anything that computes to zero
    or less (including missing or non-numeric input) costs
    ``MIN_DURATION_MINUTES`` so the allocator always makes progress.
    """
    minutes = _coerce_minutes(base_minutes) * LEVEL_MULTIPLIERS.get(UserLevel(level), 1.0)
    if semi_active:
        minutes *= SEMI_ACTIVE_FACTOR
    return _finalize(minutes)


def goal_duration(goal: Goal, level: UserLevel, semi_active: bool = False) -> int:
    """Full cost of a goal taken as a whole."""
    level = UserLevel(level)
    if goal.type == GoalType.LESSON:
        if goal.sub_lessons:
            base = sum(_coerce_minutes(sub.duration_minutes) for sub in goal.sub_lessons)
        else:
            base = _coerce_minutes(goal.duration_minutes)
        return effective_duration(base, level, semi_active)

    rates = PAGE_RATES.get(goal.type)
    if rates is not None and goal.pages:
        per_page = float(rates[level])
        if goal.type == GoalType.STATUTE_READING:
            multiplier = _coerce_minutes(goal.multiplier)
            if multiplier > 1:
                per_page *= multiplier
        minutes = goal.pages * per_page
        if semi_active:
            minutes *= SEMI_ACTIVE_FACTOR
        return _finalize(minutes)

    return effective_duration(goal.duration_minutes, level, semi_active)


def review_duration(goal: Goal, level: UserLevel, semi_active: bool = False) -> int:
    full = goal_duration(goal, level, semi_active)
    if goal.type == GoalType.REVIEW:
        return full
    return max(MIN_REVIEW_MINUTES, math.ceil(REVIEW_SHARE * full))


def exam_duration(exam: Exam) -> int:
    return exam.total_questions * EXAM_MINUTES_PER_QUESTION


__all__ = [
    "EXAM_MINUTES_PER_QUESTION",
    "LEVEL_MULTIPLIERS",
    "MIN_DURATION_MINUTES",
    "PAGE_RATES",
    "effective_duration",
    "exam_duration",
    "goal_duration",
    "review_duration",
]
