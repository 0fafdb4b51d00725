"""Flattening of a discipline's goals into atomic schedulable entries."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

from .durations import effective_duration, goal_duration
from .models import Discipline, Goal, GoalType, StudyPlan, UserLevel


@dataclass(frozen=True)
class SchedulerEntry:
    goal: Goal
    subject_id: str
    subject_name: str
    duration: int
    sub_lesson_id: Optional[str] = None
    is_atomic: bool = False

    @property
    def completion_key(self) -> str:
        if self.sub_lesson_id:
            return f"{self.goal.id}:{self.sub_lesson_id}"
        return self.goal.id

    @property
    def title(self) -> str:
        if self.sub_lesson_id:
            for sub in self.goal.sub_lessons:
                if sub.id == self.sub_lesson_id:
                    return sub.title or self.goal.title
        return self.goal.title


def flatten_tasks(
    discipline: Discipline,
    level: UserLevel,
    semi_active: bool = False,
) -> List[SchedulerEntry]:
    entries: List[SchedulerEntry] = []
    for subject in sorted(discipline.subjects, key=lambda subject: subject.order):
        for goal in sorted(subject.goals, key=lambda goal: goal.order):
            if goal.type == GoalType.LESSON and goal.sub_lessons:
                for sub in goal.sub_lessons:
                    entries.append(
                        SchedulerEntry(
                            goal=goal,
                            subject_id=subject.id,
                            subject_name=subject.name,
                            duration=effective_duration(sub.duration_minutes, level, semi_active),
                            sub_lesson_id=sub.id,
                            is_atomic=True,
                        )
                    )
            else:
                entries.append(
                    SchedulerEntry(
                        goal=goal,
                        subject_id=subject.id,
                        subject_name=subject.name,
                        duration=goal_duration(goal, level, semi_active),
                    )
                )
    return entries


def flatten_plan_tasks(
    plan: StudyPlan,
    level: UserLevel,
    semi_active: bool = False,
) -> Dict[str, List[SchedulerEntry]]:
    return {
        discipline.id: flatten_tasks(discipline, level, semi_active)
        for discipline in plan.disciplines
    }


__all__ = ["SchedulerEntry", "flatten_plan_tasks", "flatten_tasks"]
