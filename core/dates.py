# core/dates.py

from datetime import date, datetime, timedelta
from typing import Optional, Tuple


def _now(now: Optional[datetime]) -> datetime:
    return now if now is not None else datetime.now()


def is_today(value: datetime, now: Optional[datetime] = None) -> bool:
    return value.date() == _now(now).date()


def is_tomorrow(value: datetime, now: Optional[datetime] = None) -> bool:
    return value.date() == _now(now).date() + timedelta(days=1)


def start_of_week(day: date) -> date:
    """Weeks start on Sunday."""
    return day - timedelta(days=(day.weekday() + 1) % 7)


def is_this_week(value: datetime, now: Optional[datetime] = None) -> bool:
    return start_of_week(value.date()) == start_of_week(_now(now).date())


def is_past(value: datetime, now: Optional[datetime] = None) -> bool:
    return value < _now(now)


def is_overdue(value: datetime, now: Optional[datetime] = None) -> bool:
    """Past, but not earlier today."""
    now = _now(now)
    return is_past(value, now) and not is_today(value, now)


def in_month(value: datetime, year: int, month: int) -> bool:
    return value.year == year and value.month == month


def previous_month(now: Optional[datetime] = None) -> Tuple[int, int]:
    """(year, month) of the calendar month before now; January wraps to December."""
    now = _now(now)
    if now.month == 1:
        return now.year - 1, 12
    return now.year, now.month - 1


def days_between(later: datetime, earlier: datetime) -> int:
    """Whole days from earlier to later, truncated toward zero."""
    return int((later - earlier) / timedelta(days=1))
