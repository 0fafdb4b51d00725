from __future__ import annotations

from datetime import date, timedelta

from study_planner.agenda import day_summary, late_items, next_item
from study_planner.models import GoalType, Routine, ScheduledItem

TODAY = date(2024, 1, 3)


def _item(unique_id: str, day: date, completed: bool = False, duration: int = 30) -> ScheduledItem:
    return ScheduledItem(
        unique_id=unique_id,
        date=day,
        goal_id=f"goal-{unique_id}",
        goal_type=GoalType.MATERIAL,
        title=unique_id,
        discipline_name="Law",
        subject_name="Principles",
        duration=duration,
        completed=completed,
    )


def _schedule():
    yesterday = TODAY - timedelta(days=1)
    last_week = TODAY - timedelta(days=7)
    tomorrow = TODAY + timedelta(days=1)
    later = TODAY + timedelta(days=3)
    return {
        yesterday.isoformat(): [_item("y1", yesterday), _item("y2", yesterday, completed=True)],
        last_week.isoformat(): [_item("w1", last_week)],
        TODAY.isoformat(): [_item("t1", TODAY, completed=True, duration=40), _item("t2", TODAY, duration=45)],
        tomorrow.isoformat(): [],
        later.isoformat(): [_item("l1", later)],
    }


def test_late_items_are_uncompleted_and_before_today() -> None:
    assert [item.unique_id for item in late_items(_schedule(), TODAY)] == ["w1", "y1"]


def test_next_item_skips_empty_days() -> None:
    item = next_item(_schedule(), TODAY)
    assert item is not None and item.unique_id == "l1"
    assert next_item({}, TODAY) is None


def test_day_summary_reports_overflow() -> None:
    # 2024-01-03 is a Wednesday.
    summary = day_summary(_schedule(), TODAY, Routine(days={"wednesday": 60}))

    assert summary.routine_minutes == 60
    assert summary.planned_minutes == 85
    assert summary.overflow_minutes == 25
    assert len(summary.groups) == 2
    assert summary.all_completed is False
