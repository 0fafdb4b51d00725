"""Collapse a day's flat item list into one card per logical goal."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from .models import GroupedItem, ScheduledItem


def group_schedule_items(items: Iterable[ScheduledItem]) -> List[GroupedItem]:
    groups: Dict[str, GroupedItem] = {}
    for item in items:
        # Reviews never merge; every other item groups under its goal.
        key = item.unique_id if item.is_review else item.goal_id
        group = groups.get(key)
        if group is None:
            group = GroupedItem(
                goal_id=item.goal_id,
                goal_type=item.goal_type,
                title=item.source_goal.title if item.source_goal else item.title,
                discipline_name=item.discipline_name,
                subject_name=item.subject_name,
                source_goal=item.source_goal,
                exam=item.exam,
                is_review=item.is_review,
            )
            groups[key] = group
        group.items.append(item)
        group.total_duration += item.duration

    for group in groups.values():
        group.completed = all(item.completed for item in group.items)
    return list(groups.values())


def review_label(item: ScheduledItem) -> Optional[str]:
    """Human readable ordinal for a review item, e.g. ``Review 2 - 7 days``."""
    if not item.is_review or item.review_interval is None:
        return None
    intervals = item.source_goal.parsed_review_intervals() if item.source_goal else []
    position = intervals.index(item.review_interval) + 1 if item.review_interval in intervals else 0
    if position:
        return f"Review {position} - {item.review_interval} days"
    return f"Review - {item.review_interval} days"


__all__ = ["group_schedule_items", "review_label"]
