"""Placement of fixed-date spaced repetition reviews onto the calendar."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from .dates import iso_key
from .durations import review_duration
from .models import (
    Discipline,
    Goal,
    Schedule,
    ScheduledItem,
    ScheduledReview,
    StudyPlan,
    Subject,
    UserLevel,
)

logger = logging.getLogger(__name__)

REVIEW_TITLE_PREFIX = "Review: "


@dataclass(frozen=True)
class GoalLocation:
    goal: Goal
    subject: Subject
    discipline: Discipline


def find_goal(plan: StudyPlan, goal_id: str) -> Optional[GoalLocation]:
    """Locate a goal in the curriculum tree along with its owners."""
    for discipline in plan.disciplines:
        for subject in discipline.subjects:
            for goal in subject.goals:
                if goal.id == goal_id:
                    return GoalLocation(goal=goal, subject=subject, discipline=discipline)
    return None


def place_reviews(
    schedule: Schedule,
    plan: StudyPlan,
    reviews: Iterable[ScheduledReview],
    level: UserLevel,
    semi_active: bool = False,
) -> int:
    """Write one item per review into its due date's bucket.

    Reviews are placed regardless of the day's budget. Reviews whose source
    goal is no longer part of the curriculum are dropped. Returns the number
    of items placed.
    """
    placed = 0
    for review in reviews:
        location = find_goal(plan, review.source_goal_id)
        if location is None:
            logger.debug(
                "Skipping review %s: goal %s is not part of plan %s",
                review.id,
                review.source_goal_id,
                plan.id,
            )
            continue
        goal = location.goal
        item = ScheduledItem(
            unique_id=review.id,
            date=review.due_date,
            goal_id=review.source_goal_id,
            goal_type=goal.type,
            title=f"{REVIEW_TITLE_PREFIX}{goal.title}",
            discipline_name=location.discipline.name,
            subject_name=location.subject.name,
            duration=review_duration(goal, level, semi_active),
            is_review=True,
            review_interval=review.interval,
            completed=review.completed,
            source_goal=goal.model_copy(deep=True),
        )
        schedule.setdefault(iso_key(review.due_date), []).append(item)
        placed += 1
    return placed


__all__ = ["GoalLocation", "REVIEW_TITLE_PREFIX", "find_goal", "place_reviews"]
