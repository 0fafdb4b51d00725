"""Learner-driven mutations of progress state.

The scheduler never writes to learner progress. These helpers implement the
explicit learner actions (completing goals, ticking reviews, pausing or
restarting a plan) and always return a new :class:`LearnerProgress` so the
host can hand an immutable snapshot to the next scheduler run.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Callable, List, Literal, Optional, Set
from uuid import uuid4

from .models import Goal, LearnerProgress, PlanConfig, ScheduledReview, StudyPlan
from .revisions import find_goal
from .telemetry import emit_event

logger = logging.getLogger(__name__)

PlanAction = Literal["pause", "reschedule", "restart"]


def _new_id() -> str:
    return uuid4().hex


def sub_lesson_key(goal_id: str, sub_lesson_id: str) -> str:
    return f"{goal_id}:{sub_lesson_id}"


def build_review_chain(
    goal: Goal,
    completed_on: date,
    id_factory: Optional[Callable[[], str]] = None,
) -> List[ScheduledReview]:
    """Create one pending review per configured offset.

    Each offset is counted from the previous review's due date, the first one
    from ``completed_on``; offsets ``1,7,15`` therefore land 1, 8 and 23 days
    after completion.
    """
    if not goal.review_enabled:
        return []
    make_id = id_factory or _new_id
    reviews: List[ScheduledReview] = []
    anchor = completed_on
    for interval in goal.parsed_review_intervals():
        anchor = anchor + timedelta(days=interval)
        reviews.append(
            ScheduledReview(
                id=make_id(),
                source_goal_id=goal.id,
                due_date=anchor,
                interval=interval,
            )
        )
    return reviews


def toggle_goal_completion(
    progress: LearnerProgress,
    plan: StudyPlan,
    goal_id: str,
    *,
    today: Optional[date] = None,
    id_factory: Optional[Callable[[], str]] = None,
) -> LearnerProgress:
    location = find_goal(plan, goal_id)
    goal = location.goal if location else None
    if goal is None:
        logger.debug("Goal %s is not part of plan %s; toggling its id only.", goal_id, plan.id)
    sub_keys = [sub_lesson_key(goal_id, sub.id) for sub in goal.sub_lessons] if goal else []
    completed = list(progress.completed_ids)
    reviews = list(progress.reviews)

    if goal_id not in completed:
        for key in [goal_id, *sub_keys]:
            if key not in completed:
                completed.append(key)
        new_reviews: List[ScheduledReview] = []
        if goal is not None:
            new_reviews = build_review_chain(goal, today or date.today(), id_factory)
            reviews.extend(new_reviews)
        emit_event(
            "goal_completed",
            user_id=progress.user_id,
            plan_id=plan.id,
            goal_id=goal_id,
            review_count=len(new_reviews),
        )
    else:
        removed = {goal_id, *sub_keys}
        completed = [key for key in completed if key not in removed]
        reviews = [review for review in reviews if review.source_goal_id != goal_id]
        emit_event(
            "goal_reopened",
            user_id=progress.user_id,
            plan_id=plan.id,
            goal_id=goal_id,
        )

    return progress.model_copy(update={"completed_ids": completed, "reviews": reviews}, deep=True)


def toggle_sub_lesson(progress: LearnerProgress, goal_id: str, sub_lesson_id: str) -> LearnerProgress:
    key = sub_lesson_key(goal_id, sub_lesson_id)
    completed = list(progress.completed_ids)
    if key in completed:
        completed.remove(key)
    else:
        completed.append(key)
    return progress.model_copy(update={"completed_ids": completed}, deep=True)


def toggle_review(progress: LearnerProgress, review_id: str) -> LearnerProgress:
    if not any(review.id == review_id for review in progress.reviews):
        raise LookupError(f"Review '{review_id}' was not found.")
    reviews = [
        review.model_copy(update={"completed": not review.completed}) if review.id == review_id else review
        for review in progress.reviews
    ]
    return progress.model_copy(update={"reviews": reviews}, deep=True)


def _plan_goal_ids(plan: StudyPlan) -> Set[str]:
    return {
        goal.id
        for discipline in plan.disciplines
        for subject in discipline.subjects
        for goal in subject.goals
    }


def apply_plan_action(
    progress: LearnerProgress,
    plan: StudyPlan,
    action: PlanAction,
    *,
    today: Optional[date] = None,
) -> LearnerProgress:
    """Pause/resume, reschedule from today, or restart a plan from scratch."""
    today = today or date.today()
    configs = dict(progress.plan_configs)
    config = configs.get(plan.id) or PlanConfig(start_date=today)
    update = {}

    if action == "pause":
        configs[plan.id] = config.model_copy(update={"is_paused": not config.is_paused})
    elif action == "reschedule":
        configs[plan.id] = PlanConfig(start_date=today, is_paused=False)
    elif action == "restart":
        goal_ids = _plan_goal_ids(plan)
        update["completed_ids"] = [
            key for key in progress.completed_ids if key.split(":", 1)[0] not in goal_ids
        ]
        update["reviews"] = [
            review for review in progress.reviews if review.source_goal_id not in goal_ids
        ]
        configs[plan.id] = PlanConfig(start_date=today, is_paused=False)
    else:
        raise ValueError(f"Unsupported plan action '{action}'.")

    update["plan_configs"] = configs
    emit_event(
        "plan_action",
        user_id=progress.user_id,
        plan_id=plan.id,
        action=action,
        is_paused=configs[plan.id].is_paused,
        start_date=configs[plan.id].start_date,
    )
    return progress.model_copy(update=update, deep=True)


__all__ = [
    "PlanAction",
    "apply_plan_action",
    "build_review_chain",
    "sub_lesson_key",
    "toggle_goal_completion",
    "toggle_review",
    "toggle_sub_lesson",
]
