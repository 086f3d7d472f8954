"""Calendar helpers shared by the rules and the optimizer.

Every function works at day granularity: a ``datetime.datetime`` is
truncated to its date before any comparison, so two values on the same
calendar day are always the same day.
"""

from __future__ import annotations

import datetime
import enum
from collections.abc import Iterable


class DayKind(enum.Enum):
    """Classification of a single calendar day."""

    HOLIDAY = "holiday"
    WEEKEND = "weekend"
    SUGGESTED_LEAVE = "suggested_leave"
    WORKING_DAY = "working_day"


def normalize(d: datetime.date) -> datetime.date:
    """Drop any time-of-day component from *d*."""
    if isinstance(d, datetime.datetime):
        return d.date()
    return d


def add_days(d: datetime.date, n: int) -> datetime.date:
    return normalize(d) + datetime.timedelta(days=n)


def day_key(d: datetime.date) -> str:
    """Canonical ``YYYY-MM-DD`` key for *d*."""
    return normalize(d).isoformat()


def holiday_set(holidays: Iterable[datetime.date]) -> frozenset[datetime.date]:
    """Normalize and de-duplicate *holidays* into a membership set."""
    return frozenset(normalize(h) for h in holidays)


def is_weekend(d: datetime.date) -> bool:
    return normalize(d).weekday() >= 5  # Saturday, Sunday


def is_holiday(d: datetime.date, holidays: frozenset[datetime.date]) -> bool:
    return normalize(d) in holidays


def is_working_day(d: datetime.date, holidays: frozenset[datetime.date]) -> bool:
    return not is_weekend(d) and not is_holiday(d, holidays)


def date_range(start: datetime.date, end: datetime.date) -> list[datetime.date]:
    """All days from *start* to *end* inclusive; empty if *end* < *start*."""
    first = normalize(start)
    span = (normalize(end) - first).days
    return [first + datetime.timedelta(days=i) for i in range(span + 1)]


def classify_day(
    d: datetime.date,
    holidays: frozenset[datetime.date],
    leave_dates: Iterable[datetime.date] = (),
) -> DayKind:
    """Classify *d* against the holiday calendar and a set of leave days.

    A holiday wins over a weekend, and both win over a suggested leave day.
    """
    if is_holiday(d, holidays):
        return DayKind.HOLIDAY
    if is_weekend(d):
        return DayKind.WEEKEND
    if normalize(d) in {normalize(x) for x in leave_dates}:
        return DayKind.SUGGESTED_LEAVE
    return DayKind.WORKING_DAY
