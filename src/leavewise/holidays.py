"""Built-in holiday presets.

Each country is a table of :class:`HolidayRule` entries.  ``us`` computes
*observed* US federal holidays: a fixed-date holiday on Saturday is
observed the preceding Friday, one on Sunday the following Monday.

``in`` lists India's fixed national holidays on their calendar dates.
No observance shift applies, so some years put a holiday on a weekend,
where it earns no extra time off.
"""

from __future__ import annotations

import calendar
import datetime
from typing import NamedTuple

from leavewise.days import add_days

Preset = list[tuple[datetime.date, str]]


class HolidayRule(NamedTuple):
    """A yearly holiday.

    Without *weekday* the holiday falls on *month*/*day*.  With it, the
    holiday is the *nth* such weekday of *month*; ``nth=-1`` means the last.
    """

    name: str
    month: int
    day: int = 1
    weekday: int | None = None
    nth: int = 1

    def date_in(self, year: int) -> datetime.date:
        if self.weekday is None:
            return datetime.date(year, self.month, self.day)
        if self.nth < 0:
            last = datetime.date(year, self.month, calendar.monthrange(year, self.month)[1])
            return add_days(last, -((last.weekday() - self.weekday) % 7))
        first = datetime.date(year, self.month, 1)
        return add_days(first, (self.weekday - first.weekday()) % 7 + 7 * (self.nth - 1))


class CountryPreset(NamedTuple):
    description: str
    rules: tuple[HolidayRule, ...]
    observed: bool = False


def _observed(d: datetime.date) -> datetime.date:
    """Move a Saturday holiday to Friday and a Sunday one to Monday."""
    if d.weekday() == calendar.SATURDAY:
        return add_days(d, -1)
    if d.weekday() == calendar.SUNDAY:
        return add_days(d, 1)
    return d


_COUNTRIES: dict[str, CountryPreset] = {
    "in": CountryPreset(
        "India national holidays",
        (
            HolidayRule("Republic Day", 1, 26),
            HolidayRule("Independence Day", 8, 15),
            HolidayRule("Gandhi Jayanti", 10, 2),
            HolidayRule("Christmas Day", 12, 25),
        ),
    ),
    "us": CountryPreset(
        "United States federal holidays",
        (
            HolidayRule("New Year's Day", 1, 1),
            HolidayRule("Martin Luther King Jr. Day", 1, weekday=calendar.MONDAY, nth=3),
            HolidayRule("Presidents' Day", 2, weekday=calendar.MONDAY, nth=3),
            HolidayRule("Memorial Day", 5, weekday=calendar.MONDAY, nth=-1),
            HolidayRule("Juneteenth", 6, 19),
            HolidayRule("Independence Day", 7, 4),
            HolidayRule("Labor Day", 9, weekday=calendar.MONDAY),
            HolidayRule("Thanksgiving", 11, weekday=calendar.THURSDAY, nth=4),
            HolidayRule("Christmas Day", 12, 25),
        ),
        observed=True,
    ),
}

PRESETS: dict[str, str] = {code: p.description for code, p in _COUNTRIES.items()}


def _resolve(preset: CountryPreset, year: int) -> Preset:
    days: Preset = []
    for rule in preset.rules:
        d = rule.date_in(year)
        # floating holidays already land on a weekday
        if preset.observed and rule.weekday is None:
            d = _observed(d)
        days.append((d, rule.name))
    return sorted(days)


def us_holidays(year: int) -> Preset:
    """US federal holidays (observed) for *year*."""
    return _resolve(_COUNTRIES["us"], year)


def in_holidays(year: int) -> Preset:
    return _resolve(_COUNTRIES["in"], year)


def get_holidays(country: str, year: int) -> Preset:
    """Return ``(date, name)`` pairs for the *country* preset and *year*.

    Raises ``KeyError`` if the country is not supported.
    """
    preset = _COUNTRIES.get(country)
    if preset is None:
        supported = ", ".join(sorted(PRESETS))
        raise KeyError(f"Unknown country preset {country!r}. Supported: {supported}")
    return _resolve(preset, year)
