"""Monday–Sunday week boundaries.

Plans always cover exactly one calendar week. Weekdays use ISO numbering
(Monday=1 .. Sunday=7) so a Sunday never anchors to the following Monday.
"""

from datetime import date, datetime, timedelta
from typing import NamedTuple


class WeekBounds(NamedTuple):
    """Week boundaries as ISO dates (YYYY-MM-DD)."""

    week_start: str
    week_end: str


def _as_date(value: date | str) -> date:
    if isinstance(value, str):
        return date.fromisoformat(value)
    if isinstance(value, datetime):
        return value.date()
    return value


def week_bounds(value: date | str) -> WeekBounds:
    """Return the Monday on or before ``value`` and the Sunday after it.

    Args:
        value: Date or ISO date string

    Returns:
        WeekBounds with week_start (Monday) and week_end (week_start + 6 days)
    """
    day = _as_date(value)
    monday = day - timedelta(days=day.isoweekday() - 1)
    sunday = monday + timedelta(days=6)
    return WeekBounds(week_start=monday.isoformat(), week_end=sunday.isoformat())


def next_week_bounds(week_start: date | str) -> WeekBounds:
    """Return the bounds of the week following the one containing ``week_start``."""
    return week_bounds(_as_date(week_start) + timedelta(days=7))
