"""Weekday and ISO date helpers shared by the scheduler and agenda views."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Iterator, List

from .models import WEEKDAYS


def weekday_name(day: date) -> str:
    """Return the routine key for ``day`` (``sunday`` .. ``saturday``)."""
    # date.weekday() is Monday=0; routine keys start on Sunday.
    return WEEKDAYS[(day.weekday() + 1) % 7]


def iso_key(day: date) -> str:
    return day.isoformat()


def iter_dates(start: date, count: int) -> Iterator[date]:
    for offset in range(max(count, 0)):
        yield start + timedelta(days=offset)


def week_dates(anchor: date) -> List[date]:
    """Return the Sunday-first calendar week containing ``anchor``."""
    sunday = anchor - timedelta(days=(anchor.weekday() + 1) % 7)
    return list(iter_dates(sunday, 7))


__all__ = ["iso_key", "iter_dates", "week_dates", "weekday_name"]
