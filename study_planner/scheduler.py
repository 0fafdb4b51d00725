"""Day-by-day allocation of curriculum tasks onto the learner's calendar."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Callable, Dict, FrozenSet, List, Mapping, Optional, Sequence
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator

from .config import get_settings
from .cycle import active_cycle, flatten_cycle
from .dates import iso_key, weekday_name
from .durations import exam_duration
from .models import (
    CycleSlot,
    Exam,
    ExamAttempt,
    GoalType,
    LearnerProgress,
    Routine,
    Schedule,
    ScheduledItem,
    ScheduledReview,
    StudyPlan,
    UserLevel,
)
from .revisions import place_reviews
from .tasks import SchedulerEntry, flatten_plan_tasks
from .telemetry import emit_event

logger = logging.getLogger(__name__)


MAX_SCHEDULE_DAYS = 365
FILL_ATTEMPTS_PER_SLOT = 3
EXAM_DISCIPLINE_NAME = "Mock exam"
EXAM_SUBJECT_NAME = "General"
FALLBACK_DISCIPLINE_NAME = "Discipline"
FALLBACK_SUBJECT_NAME = "Topic"


class ScheduleRequest(BaseModel):
    """Snapshot of every input the allocator reads during one run."""

    plan: StudyPlan
    routine: Routine
    start_date: date
    completed_ids: List[str] = Field(default_factory=list)
    level: UserLevel = UserLevel.BEGINNER
    paused: bool = False
    exams: List[Exam] = Field(default_factory=list)
    exam_attempts: List[ExamAttempt] = Field(default_factory=list)
    advance_mode: bool = False
    semi_active: bool = False
    reviews: List[ScheduledReview] = Field(default_factory=list)
    today_session_seconds: int = Field(default=0, ge=0)
    today: date = Field(default_factory=date.today)

    @field_validator("completed_ids")
    @classmethod
    def _normalise_completed(cls, value: List[str]) -> List[str]:
        return sorted(set(value))


@dataclass(frozen=True)
class AllocatorState:
    """Rotation cursor plus per-discipline task cursors carried between days."""

    cycle_index: int = 0
    discipline_cursor: Mapping[str, int] = field(default_factory=dict)

    def cursor_for(self, discipline_id: str) -> int:
        return self.discipline_cursor.get(discipline_id, 0)


@dataclass
class _SlotVisit:
    available: int
    advance_cycle: bool


class ScheduleEngine:
    """Greedy single-pass allocator for one schedule request.

    The engine flattens the cycle and every discipline's tasks once, then
    walks forward one calendar day at a time. Cursor state lives in an
    :class:`AllocatorState` that each call to :meth:`step_day` consumes and
    returns, so a single day can be exercised on its own.
    """

    def __init__(
        self,
        request: ScheduleRequest,
        *,
        max_days: int = MAX_SCHEDULE_DAYS,
        fill_attempts_per_slot: int = FILL_ATTEMPTS_PER_SLOT,
        id_factory: Optional[Callable[[], str]] = None,
    ) -> None:
        self._request = request
        self._max_days = max(max_days, 0)
        self._fill_attempts_per_slot = max(fill_attempts_per_slot, 1)
        self._id_factory = id_factory or (lambda: uuid4().hex)
        self._completed: FrozenSet[str] = frozenset(request.completed_ids)
        self._exams: Dict[str, Exam] = {exam.id: exam for exam in request.exams}
        self._attempted_exam_ids: FrozenSet[str] = frozenset(
            attempt.exam_id for attempt in request.exam_attempts
        )
        self._discipline_names: Dict[str, str] = {
            discipline.id: discipline.name for discipline in request.plan.disciplines
        }
        cycle = active_cycle(request.plan)
        self._slots: List[CycleSlot] = (
            flatten_cycle(cycle, request.plan.disciplines) if cycle is not None else []
        )
        self._tasks: Dict[str, List[SchedulerEntry]] = flatten_plan_tasks(
            request.plan,
            request.level,
            request.semi_active,
        )
        self.days_walked = 0

    @property
    def slots(self) -> Sequence[CycleSlot]:
        return self._slots

    def tasks_for(self, discipline_id: str) -> Sequence[SchedulerEntry]:
        return self._tasks.get(discipline_id, [])

    def generate(self) -> Schedule:
        request = self._request
        schedule: Schedule = {}
        place_reviews(
            schedule,
            request.plan,
            request.reviews,
            request.level,
            request.semi_active,
        )
        if not self._slots:
            logger.debug("Plan %s has no usable cycle slots; only reviews were placed.", request.plan.id)
            return schedule

        state = AllocatorState(discipline_cursor={key: 0 for key in self._tasks})
        day = request.start_date
        self.days_walked = 0
        while self.days_walked < self._max_days:
            if request.paused and day >= request.today:
                logger.debug("Plan %s is paused; stopping the walk at %s.", request.plan.id, day)
                break
            state = self.step_day(state, day, schedule)
            day += timedelta(days=1)
            self.days_walked += 1
        else:
            logger.debug("Reached the %d day horizon for plan %s.", self._max_days, request.plan.id)
        return schedule

    def available_minutes(self, day: date, schedule: Schedule) -> int:
        """Routine minutes for ``day`` net of items already placed on it."""
        request = self._request
        advancing_today = self._advancing(day)
        available = request.routine.minutes_for(weekday_name(day))
        if advancing_today:
            available -= request.today_session_seconds // 60
        for item in schedule.get(iso_key(day), []):
            if advancing_today and item.completed:
                continue
            available -= item.duration
        return available

    def step_day(self, state: AllocatorState, day: date, schedule: Schedule) -> AllocatorState:
        """Fill ``day`` and return the cursor state for the following day."""
        available = self.available_minutes(day, schedule)
        if available <= 0 or not self._slots:
            logger.debug("%s: no study time left (%d minutes), nothing allocated.", day, available)
            return state

        placed_before = len(schedule.get(iso_key(day), []))
        starting_minutes = available
        cycle_index = state.cycle_index
        cursors: Dict[str, int] = dict(state.discipline_cursor)
        slot_count = len(self._slots)
        max_attempts = slot_count * self._fill_attempts_per_slot
        attempts = 0
        while available > 0 and attempts < max_attempts:
            slot = self._slots[cycle_index % slot_count]
            if slot.exam_id:
                exam = self._exams.get(slot.exam_id)
                if exam is not None:
                    available -= self._place_exam(exam, day, schedule)
                else:
                    logger.debug("Cycle slot references unknown exam %s.", slot.exam_id)
                cycle_index += 1
            elif slot.discipline_id:
                visit = self._visit_discipline(slot, cursors, available, day, schedule)
                available = visit.available
                if visit.advance_cycle:
                    cycle_index += 1
            else:
                cycle_index += 1
            attempts += 1

        logger.debug(
            "%s: %d minutes available, %d items placed, %d minutes left, attempt cap %s.",
            day,
            starting_minutes,
            len(schedule.get(iso_key(day), [])) - placed_before,
            available,
            "hit" if attempts >= max_attempts else "not hit",
        )
        return AllocatorState(cycle_index=cycle_index, discipline_cursor=cursors)

    def _advancing(self, day: date) -> bool:
        return self._request.advance_mode and day == self._request.today

    def _place_exam(self, exam: Exam, day: date, schedule: Schedule) -> int:
        completed = exam.id in self._attempted_exam_ids
        duration = exam_duration(exam)
        schedule.setdefault(iso_key(day), []).append(
            ScheduledItem(
                unique_id=self._id_factory(),
                date=day,
                goal_id=exam.id,
                goal_type=GoalType.EXAM,
                title=exam.title,
                discipline_name=EXAM_DISCIPLINE_NAME,
                subject_name=EXAM_SUBJECT_NAME,
                duration=duration,
                completed=completed,
                exam=exam.model_copy(deep=True),
            )
        )
        # Exams are placed whatever the remaining budget; time already spent is not charged twice.
        if self._advancing(day) and completed:
            return 0
        return duration

    def _visit_discipline(
        self,
        slot: CycleSlot,
        cursors: Dict[str, int],
        available: int,
        day: date,
        schedule: Schedule,
    ) -> _SlotVisit:
        discipline_id = slot.discipline_id or ""
        tasks = self._tasks.get(discipline_id, [])
        cursor = cursors.get(discipline_id, 0)
        if cursor >= len(tasks):
            return _SlotVisit(available=available, advance_cycle=True)

        max_subjects = slot.subjects_per_visit or 1
        subjects_processed = 0
        current_subject = tasks[cursor].subject_id
        advancing_today = self._advancing(day)
        worked = False

        while cursor < len(tasks):
            task = tasks[cursor]
            done = task.completion_key in self._completed
            if available <= 0 and not done:
                break
            if task.subject_id != current_subject:
                subjects_processed += 1
                if subjects_processed >= max_subjects:
                    break
                current_subject = task.subject_id
            if available <= 0:
                break
            # Force-fit: a task started with any budget left is scheduled in full.
            self._place_task(task, discipline_id, done, day, schedule)
            available -= 0 if (advancing_today and done) else task.duration
            cursor += 1
            worked = True

        cursors[discipline_id] = cursor
        exhausted = cursor >= len(tasks)
        if worked or exhausted:
            advance = subjects_processed >= max_subjects or exhausted
        else:
            advance = available > 0
        return _SlotVisit(available=available, advance_cycle=advance)

    def _place_task(
        self,
        task: SchedulerEntry,
        discipline_id: str,
        done: bool,
        day: date,
        schedule: Schedule,
    ) -> None:
        schedule.setdefault(iso_key(day), []).append(
            ScheduledItem(
                unique_id=self._id_factory(),
                date=day,
                goal_id=task.goal.id,
                sub_lesson_id=task.sub_lesson_id,
                goal_type=task.goal.type,
                title=task.title,
                discipline_name=self._discipline_names.get(discipline_id) or FALLBACK_DISCIPLINE_NAME,
                subject_name=task.subject_name or FALLBACK_SUBJECT_NAME,
                duration=task.duration,
                completed=done,
                source_goal=task.goal.model_copy(deep=True),
            )
        )


def generate_schedule_for_request(
    request: ScheduleRequest,
    *,
    id_factory: Optional[Callable[[], str]] = None,
) -> Schedule:
    """Run the allocator for ``request`` and report the run through telemetry."""
    settings = get_settings()
    engine = ScheduleEngine(
        request,
        max_days=settings.max_days,
        fill_attempts_per_slot=settings.fill_attempts_per_slot,
        id_factory=id_factory,
    )
    start = time.perf_counter()
    try:
        schedule = engine.generate()
    except Exception as exc:  # noqa: BLE001
        duration_ms = (time.perf_counter() - start) * 1000.0
        emit_event(
            "schedule_generation",
            plan_id=request.plan.id,
            status="error",
            duration_ms=round(duration_ms, 2),
            item_count=0,
            error=str(exc),
            exception_type=exc.__class__.__name__,
        )
        logger.exception("Failed to generate schedule for plan %s", request.plan.id)
        raise
    duration_ms = (time.perf_counter() - start) * 1000.0
    items = [item for bucket in schedule.values() for item in bucket]
    emit_event(
        "schedule_generation",
        plan_id=request.plan.id,
        status="success",
        duration_ms=round(duration_ms, 2),
        start_date=request.start_date,
        days_walked=engine.days_walked,
        day_count=len(schedule),
        item_count=len(items),
        review_count=sum(1 for item in items if item.is_review),
        total_minutes=sum(item.duration for item in items),
        paused=request.paused,
        advance_mode=request.advance_mode,
    )
    return schedule


def generate_schedule(
    plan: StudyPlan,
    routine: Routine,
    start_date: date,
    completed_ids: Sequence[str],
    level: UserLevel,
    paused: bool,
    exams: Sequence[Exam],
    exam_attempts: Sequence[ExamAttempt],
    advance_mode: bool = False,
    semi_active: bool = False,
    reviews: Optional[Sequence[ScheduledReview]] = None,
    today_session_seconds: int = 0,
    *,
    today: Optional[date] = None,
    id_factory: Optional[Callable[[], str]] = None,
) -> Schedule:
    request = ScheduleRequest(
        plan=plan,
        routine=routine,
        start_date=start_date,
        completed_ids=list(completed_ids),
        level=level,
        paused=paused,
        exams=list(exams),
        exam_attempts=list(exam_attempts),
        advance_mode=advance_mode,
        semi_active=semi_active,
        reviews=list(reviews or []),
        today_session_seconds=max(int(today_session_seconds or 0), 0),
        today=today or date.today(),
    )
    return generate_schedule_for_request(request, id_factory=id_factory)


def build_request_for_learner(
    progress: LearnerProgress,
    plan: StudyPlan,
    *,
    exams: Sequence[Exam] = (),
    exam_attempts: Sequence[ExamAttempt] = (),
    advance_mode: bool = False,
    today_session_seconds: int = 0,
    today: Optional[date] = None,
) -> Optional[ScheduleRequest]:
    """Assemble a request from the learner's stored progress.

    Returns ``None`` when the learner's routine has no study time at all, in
    which case the host shows an empty schedule.
    """
    if not progress.routine.has_study_time():
        return None
    today = today or date.today()
    config = progress.plan_configs.get(plan.id)
    user_attempts = [attempt for attempt in exam_attempts if attempt.user_id == progress.user_id]
    return ScheduleRequest(
        plan=plan,
        routine=progress.routine,
        start_date=config.start_date if config else today,
        completed_ids=list(progress.completed_ids),
        level=progress.level,
        paused=config.is_paused if config else False,
        exams=list(exams),
        exam_attempts=user_attempts,
        advance_mode=advance_mode,
        semi_active=progress.semi_active,
        reviews=list(progress.reviews),
        today_session_seconds=max(int(today_session_seconds or 0), 0),
        today=today,
    )


__all__ = [
    "AllocatorState",
    "FILL_ATTEMPTS_PER_SLOT",
    "MAX_SCHEDULE_DAYS",
    "ScheduleEngine",
    "ScheduleRequest",
    "build_request_for_learner",
    "generate_schedule",
    "generate_schedule_for_request",
]
