"""Curriculum, cycle, learner progress and schedule models."""

from __future__ import annotations

import datetime as dt
import math
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class GoalType(str, Enum):
    LESSON = "LESSON"
    MATERIAL = "MATERIAL"
    PRACTICE_QUESTIONS = "PRACTICE_QUESTIONS"
    STATUTE_READING = "STATUTE_READING"
    SUMMARY = "SUMMARY"
    REVIEW = "REVIEW"
    # Only carried by scheduled items standing in for a mock exam slot.
    EXAM = "EXAM"


class UserLevel(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


def _lenient_number(value: Any) -> Optional[float]:
    """Admin-entered numbers arrive as blanks, text or NaN; those mean "not set"."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


class SubLesson(BaseModel):
    """Single video or lesson unit inside a LESSON goal."""

    id: str
    title: str
    duration_minutes: Optional[float] = None
    link: Optional[str] = None

    @field_validator("duration_minutes", mode="before")
    @classmethod
    def _lenient_duration(cls, value: Any) -> Optional[float]:
        return _lenient_number(value)


class GoalResource(BaseModel):
    """Named link or file attached to a goal; only read by presentation layers."""

    kind: Literal["link", "file"] = "link"
    name: str
    url: str


class Goal(BaseModel):
    """One curriculum item: a lesson, a reading assignment, a question block..."""

    id: str
    title: str
    type: GoalType
    order: int = 0
    duration_minutes: Optional[float] = None
    pages: Optional[float] = None
    articles: Optional[str] = None
    multiplier: Optional[float] = None
    review_enabled: bool = False
    review_intervals: Optional[str] = None
    sub_lessons: List[SubLesson] = Field(default_factory=list)
    resources: List[GoalResource] = Field(default_factory=list)
    description: Optional[str] = None
    color: Optional[str] = None

    @field_validator("duration_minutes", "multiplier", mode="before")
    @classmethod
    def _lenient_numbers(cls, value: Any) -> Optional[float]:
        return _lenient_number(value)

    @field_validator("pages", mode="before")
    @classmethod
    def _lenient_pages(cls, value: Any) -> Optional[float]:
        pages = _lenient_number(value)
        if pages is None or pages < 0:
            return None
        return pages

    def parsed_review_intervals(self) -> List[int]:
        """Return the configured review offsets, ignoring fragments that are not integers."""
        raw = (self.review_intervals or "").strip()
        if not raw:
            return []
        intervals: List[int] = []
        for fragment in raw.split(","):
            fragment = fragment.strip()
            try:
                intervals.append(int(fragment))
            except ValueError:
                continue
        return intervals


class Subject(BaseModel):
    id: str
    name: str
    order: int = 0
    goals: List[Goal] = Field(default_factory=list)


class Folder(BaseModel):
    id: str
    name: str
    order: int = 0


class Discipline(BaseModel):
    id: str
    name: str
    order: int = 0
    folder_id: Optional[str] = None
    subjects: List[Subject] = Field(default_factory=list)


class CycleSlot(BaseModel):
    """One position in the study rotation.

    A slot references exactly one of a discipline, a folder of disciplines or
    a mock exam. Folder slots are expanded away by the cycle flattener.
    """

    discipline_id: Optional[str] = None
    folder_id: Optional[str] = None
    exam_id: Optional[str] = None
    subjects_per_visit: int = Field(default=1, ge=0)

    @model_validator(mode="after")
    def _single_reference(self) -> "CycleSlot":
        references = [ref for ref in (self.discipline_id, self.folder_id, self.exam_id) if ref]
        if len(references) > 1:
            raise ValueError("A cycle slot may reference only one discipline, folder or exam.")
        return self


class Cycle(BaseModel):
    id: str
    name: str = ""
    order: int = 0
    slots: List[CycleSlot] = Field(default_factory=list)


class StudyPlan(BaseModel):
    """Curriculum tree plus the study rotations authored for it."""

    id: str
    name: str
    folders: List[Folder] = Field(default_factory=list)
    disciplines: List[Discipline] = Field(default_factory=list)
    cycles: List[Cycle] = Field(default_factory=list)


class Exam(BaseModel):
    id: str
    title: str
    total_questions: int = Field(default=0, ge=0)


class ExamAttempt(BaseModel):
    id: str
    exam_id: str
    user_id: str


class ScheduledReview(BaseModel):
    """Fixed-date spaced repetition entry created when a goal is completed."""

    id: str
    source_goal_id: str
    due_date: date
    interval: int
    completed: bool = False


class PlanConfig(BaseModel):
    start_date: date
    is_paused: bool = False


WEEKDAYS = ("sunday", "monday", "tuesday", "wednesday", "thursday", "friday", "saturday")


class Routine(BaseModel):
    """Minutes available per weekday name; missing days mean no study."""

    days: Dict[str, int] = Field(default_factory=dict)

    def minutes_for(self, weekday: str) -> int:
        return int(self.days.get(weekday, 0) or 0)

    def has_study_time(self) -> bool:
        return any((minutes or 0) > 0 for minutes in self.days.values())


class LearnerProgress(BaseModel):
    """Mutable learner state owned by the host application."""

    user_id: str
    completed_ids: List[str] = Field(default_factory=list)
    level: UserLevel = UserLevel.BEGINNER
    semi_active: bool = False
    reviews: List[ScheduledReview] = Field(default_factory=list)
    plan_configs: Dict[str, PlanConfig] = Field(default_factory=dict)
    routine: Routine = Field(default_factory=Routine)
    total_study_seconds: int = Field(default=0, ge=0)
    capabilities: List[str] = Field(default_factory=list)


class ScheduledItem(BaseModel):
    """Entry in one date bucket of a generated schedule."""

    unique_id: str
    date: dt.date
    goal_id: str
    sub_lesson_id: Optional[str] = None
    goal_type: GoalType
    title: str
    discipline_name: str
    subject_name: str
    duration: int
    is_review: bool = False
    review_interval: Optional[int] = None
    completed: bool = False
    source_goal: Optional[Goal] = None
    exam: Optional[Exam] = None


class GroupedItem(BaseModel):
    """One card per logical goal, merging a lesson's sub-lesson items."""

    goal_id: str
    goal_type: GoalType
    title: str
    discipline_name: str
    subject_name: str
    total_duration: int = 0
    items: List[ScheduledItem] = Field(default_factory=list)
    source_goal: Optional[Goal] = None
    exam: Optional[Exam] = None
    completed: bool = True
    is_review: bool = False


Schedule = Dict[str, List[ScheduledItem]]


__all__ = [
    "Cycle",
    "CycleSlot",
    "Discipline",
    "Exam",
    "ExamAttempt",
    "Folder",
    "Goal",
    "GoalResource",
    "GoalType",
    "GroupedItem",
    "LearnerProgress",
    "PlanConfig",
    "Routine",
    "Schedule",
    "ScheduledItem",
    "ScheduledReview",
    "StudyPlan",
    "SubLesson",
    "Subject",
    "UserLevel",
    "WEEKDAYS",
]
