"""Business rules every candidate vacation must pass."""

from __future__ import annotations

import datetime
from collections.abc import Sequence

from leavewise.days import is_weekend, is_working_day, normalize

MAX_CONSECUTIVE_LEAVE = 3
ANCHOR_REACH = 3


def exceeds_max_consecutive_working_leave(
    leave_dates: Sequence[datetime.date],
    holidays: frozenset[datetime.date],
    max_run: int = MAX_CONSECUTIVE_LEAVE,
) -> bool:
    """Return True if *leave_dates* contain a run longer than *max_run*.

    A run is a sequence of leave days one calendar day apart where each
    day after the first is a working day on the holiday calendar.  Leave
    days themselves are not treated as off when classifying.
    """
    ordered = sorted(normalize(d) for d in leave_dates)
    streak = 1
    for prev, cur in zip(ordered, ordered[1:]):
        if (cur - prev).days == 1 and is_working_day(cur, holidays):
            streak += 1
            if streak > max_run:
                return True
        else:
            streak = 1
    return False


def has_holiday_anchor(
    leave_dates: Sequence[datetime.date],
    holidays: frozenset[datetime.date],
    reach: int = ANCHOR_REACH,
) -> bool:
    """Return True if some leave day is within *reach* days of a weekday holiday."""
    weekday_holidays = [h for h in holidays if not is_weekend(h)]
    return any(
        abs((normalize(d) - h).days) <= reach for d in leave_dates for h in weekday_holidays
    )
