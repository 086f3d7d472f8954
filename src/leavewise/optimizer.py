"""Leave Optimizer

Recommend which working days to take as leave so that they join weekends
and holidays into longer stretches of time off.

The engine is a greedy heuristic:

  1. For every weekday holiday, collect the working days right before and
     right after it and build up to three candidates (before, after, both).
  2. Reject candidates that break the business rules, expand the rest to
     the full surrounding run of days off.
  3. Rank candidates by length or by efficiency and pick non-overlapping
     ones until the leave budget runs out.
"""

from __future__ import annotations

import calendar
import datetime
from collections.abc import Iterable, Sequence
from typing import NamedTuple

from loguru import logger

from leavewise.days import (
    add_days,
    date_range,
    day_key,
    holiday_set,
    is_holiday,
    is_weekend,
    is_working_day,
    normalize,
)
from leavewise.rules import (
    MAX_CONSECUTIVE_LEAVE,
    exceeds_max_consecutive_working_leave,
    has_holiday_anchor,
)

SEED_WINDOW = 3

# ---------------------------------------------------------------------------
# Data types
# ---------------------------------------------------------------------------


class Opportunity(NamedTuple):
    """A candidate vacation built around one holiday."""

    leave_dates: list[datetime.date]
    start_date: datetime.date
    end_date: datetime.date
    total_days: int
    bonus_days: int
    efficiency: float
    anchor: datetime.date


class Recommendation(NamedTuple):
    """An accepted opportunity, as shown to the user."""

    leave_dates: list[datetime.date]
    start_date: datetime.date
    end_date: datetime.date
    total_days: int
    leaves_used: int
    description: str


class OptimizationResult(NamedTuple):
    recommendations: list[Recommendation]
    optimized_leaves: list[datetime.date]
    total_vacations: int
    longest_break: int
    leaves_remaining: int


# ---------------------------------------------------------------------------
# Span expansion
# ---------------------------------------------------------------------------


def extend_to_full_vacation(
    leave_dates: Sequence[datetime.date],
    holidays: frozenset[datetime.date],
    anchor: datetime.date,
) -> tuple[datetime.date, datetime.date]:
    """Grow the span around *anchor* and *leave_dates* to the full run of days off.

    A day is off when it is a weekend, a holiday or one of *leave_dates*.
    The span keeps growing in each direction until it hits a day that is
    none of those.
    """
    leave_keys = {day_key(d) for d in leave_dates}

    def is_off(d: datetime.date) -> bool:
        return is_weekend(d) or is_holiday(d, holidays) or day_key(d) in leave_keys

    seeds = [normalize(anchor), *(normalize(d) for d in leave_dates)]
    start = min(seeds)
    end = max(seeds)

    while is_off(add_days(start, -1)):
        start = add_days(start, -1)
    while is_off(add_days(end, 1)):
        end = add_days(end, 1)

    return start, end


# ---------------------------------------------------------------------------
# Opportunity generation
# ---------------------------------------------------------------------------


def build_opportunity(
    leave_dates: Sequence[datetime.date],
    holidays: frozenset[datetime.date],
    anchor: datetime.date,
    *,
    max_consecutive_leave: int = MAX_CONSECUTIVE_LEAVE,
) -> Opportunity | None:
    """Validate and expand a seed of leave days; ``None`` if it is rejected."""
    if not leave_dates:
        return None
    if exceeds_max_consecutive_working_leave(leave_dates, holidays, max_consecutive_leave):
        return None
    if not has_holiday_anchor(leave_dates, holidays):
        return None

    start, end = extend_to_full_vacation(leave_dates, holidays, anchor)
    total_days = len(date_range(start, end))
    leaves = [normalize(d) for d in leave_dates]

    return Opportunity(
        leave_dates=leaves,
        start_date=start,
        end_date=end,
        total_days=total_days,
        bonus_days=total_days - len(leaves),
        efficiency=total_days / len(leaves),
        anchor=normalize(anchor),
    )


def find_opportunities_around_holiday(
    holiday: datetime.date,
    holidays: frozenset[datetime.date],
    *,
    seed_window: int = SEED_WINDOW,
    max_consecutive_leave: int = MAX_CONSECUTIVE_LEAVE,
) -> list[Opportunity]:
    """Build the before, after and combined candidates for one holiday.

    Holidays on a weekend produce nothing.  A negative *seed_window* raises
    ``ValueError``.
    """
    if seed_window < 0:
        raise ValueError(f"seed_window must be >= 0, got {seed_window}")
    if is_weekend(holiday):
        return []

    before: list[datetime.date] = []
    d = add_days(holiday, -1)
    while is_working_day(d, holidays):
        before.insert(0, d)
        d = add_days(d, -1)

    after: list[datetime.date] = []
    d = add_days(holiday, 1)
    while is_working_day(d, holidays):
        after.append(d)
        d = add_days(d, 1)

    before_seed = before[max(len(before) - seed_window, 0):]
    after_seed = after[:seed_window]

    results: list[Opportunity] = []
    for seed in (before_seed, after_seed, before_seed + after_seed):
        opp = build_opportunity(
            seed, holidays, holiday, max_consecutive_leave=max_consecutive_leave
        )
        if opp is not None:
            results.append(opp)
    return results


def find_opportunities(
    holidays: Iterable[datetime.date],
    *,
    seed_window: int = SEED_WINDOW,
    max_consecutive_leave: int = MAX_CONSECUTIVE_LEAVE,
) -> list[Opportunity]:
    """All candidates for all holidays, in holiday order.  Overlaps are kept."""
    hset = holiday_set(holidays)
    opportunities: list[Opportunity] = []
    for h in sorted(hset):
        opportunities.extend(
            find_opportunities_around_holiday(
                h,
                hset,
                seed_window=seed_window,
                max_consecutive_leave=max_consecutive_leave,
            )
        )
    return opportunities


# ---------------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------------


def select_opportunities(
    candidates: Sequence[Opportunity],
    total_leaves: int,
    prefer_longer: bool,
) -> list[Opportunity]:
    """Greedily pick non-overlapping candidates within *total_leaves*.

    Candidates are ranked by ``total_days`` when *prefer_longer* is set,
    otherwise by ``efficiency``, best first.  The sort is stable, so ties
    keep their generation order.
    """
    if prefer_longer:
        ranked = sorted(candidates, key=lambda o: o.total_days, reverse=True)
    else:
        ranked = sorted(candidates, key=lambda o: o.efficiency, reverse=True)

    used: set[str] = set()
    used_leaves = 0
    selected: list[Opportunity] = []

    for opp in ranked:
        keys = [day_key(d) for d in opp.leave_dates]
        if any(k in used for k in keys):
            continue
        if used_leaves + len(keys) > total_leaves:
            continue
        used.update(keys)
        used_leaves += len(keys)
        selected.append(opp)

    return selected


def to_recommendation(opp: Opportunity) -> Recommendation:
    n = len(opp.leave_dates)
    return Recommendation(
        leave_dates=list(opp.leave_dates),
        start_date=opp.start_date,
        end_date=opp.end_date,
        total_days=opp.total_days,
        leaves_used=n,
        description=f"Take {n} leave day(s) to get {opp.total_days} continuous days off",
    )


def summarize(selected: Sequence[Opportunity], total_leaves: int) -> OptimizationResult:
    """Aggregate the selected opportunities into the final result."""
    recommendations = [to_recommendation(o) for o in selected]
    return OptimizationResult(
        recommendations=recommendations,
        optimized_leaves=[d for r in recommendations for d in r.leave_dates],
        total_vacations=len(recommendations),
        longest_break=max((r.total_days for r in recommendations), default=0),
        leaves_remaining=total_leaves - sum(r.leaves_used for r in recommendations),
    )


def empty_result(total_leaves: int) -> OptimizationResult:
    return OptimizationResult(
        recommendations=[],
        optimized_leaves=[],
        total_vacations=0,
        longest_break=0,
        leaves_remaining=total_leaves,
    )


# ---------------------------------------------------------------------------
# Optimizer
# ---------------------------------------------------------------------------


class LeaveOptimizer:
    """Places leave days next to holidays to get the longest breaks.

    Holidays are normalized to dates and de-duplicated on construction and
    never change afterwards.  ``sandwich_rule`` is accepted for callers that
    expose it but does not influence the result.
    """

    def __init__(
        self,
        holidays: Iterable[datetime.date],
        total_leaves: int,
        sandwich_rule: bool = False,
        prefer_longer: bool = False,
        *,
        seed_window: int = SEED_WINDOW,
        max_consecutive_leave: int = MAX_CONSECUTIVE_LEAVE,
    ):
        if seed_window < 0:
            raise ValueError(f"seed_window must be >= 0, got {seed_window}")
        if max_consecutive_leave < 1:
            raise ValueError(
                f"max_consecutive_leave must be >= 1, got {max_consecutive_leave}"
            )
        self.holidays = holiday_set(holidays)
        self.total_leaves = total_leaves
        self.sandwich_rule = sandwich_rule
        self.prefer_longer = prefer_longer
        self.seed_window = seed_window
        self.max_consecutive_leave = max_consecutive_leave

    def find_opportunities(self) -> list[Opportunity]:
        return find_opportunities(
            self.holidays,
            seed_window=self.seed_window,
            max_consecutive_leave=self.max_consecutive_leave,
        )

    def optimize(self) -> OptimizationResult:
        if not self.holidays or self.total_leaves <= 0:
            logger.debug(
                f"Nothing to optimize (holidays={len(self.holidays)}, "
                f"total_leaves={self.total_leaves})"
            )
            return empty_result(self.total_leaves)

        candidates = self.find_opportunities()
        selected = select_opportunities(candidates, self.total_leaves, self.prefer_longer)
        result = summarize(selected, self.total_leaves)

        logger.debug(
            f"Selected {len(selected)} of {len(candidates)} candidates "
            f"(prefer_longer={self.prefer_longer}, "
            f"leaves_remaining={result.leaves_remaining})"
        )
        return result


def optimize_leaves(
    holidays: Iterable[datetime.date],
    total_leaves: int,
    sandwich_rule: bool = False,
    prefer_longer: bool = False,
    *,
    seed_window: int = SEED_WINDOW,
    max_consecutive_leave: int = MAX_CONSECUTIVE_LEAVE,
) -> OptimizationResult:
    """Recommend leave days around *holidays* within a budget of *total_leaves*."""
    return LeaveOptimizer(
        holidays,
        total_leaves,
        sandwich_rule,
        prefer_longer,
        seed_window=seed_window,
        max_consecutive_leave=max_consecutive_leave,
    ).optimize()


# ---------------------------------------------------------------------------
# Pretty-print helpers
# ---------------------------------------------------------------------------


def format_result(result: OptimizationResult, optimizer: LeaveOptimizer) -> str:
    """Return a human-readable summary of an optimization result."""
    lines: list[str] = []
    w = 64

    lines.append("")
    lines.append("=" * w)
    objective = "Longest breaks" if optimizer.prefer_longer else "Most days off per leave day"
    lines.append(f"  RECOMMENDATIONS: {objective}")
    lines.append("=" * w)

    used = optimizer.total_leaves - result.leaves_remaining
    total_off = sum(r.total_days for r in result.recommendations)

    lines.append(f"  Leave days used: {used} / {optimizer.total_leaves}")
    lines.append(f"  Leave days remaining: {result.leaves_remaining}")
    lines.append(f"  Total days off: {total_off}")
    lines.append(f"  Vacations: {result.total_vacations}")
    lines.append(f"  Longest break: {result.longest_break} days")
    if used > 0:
        lines.append(f"  Efficiency: {total_off / used:.1f}x (days off per leave day)")
    lines.append("")

    if not result.recommendations:
        lines.append("  No leave opportunities found.")
        return "\n".join(lines)

    lines.append("  Vacation Blocks:")
    lines.append("  " + "-" * (w - 4))

    for i, rec in enumerate(result.recommendations, 1):
        n = rec.total_days
        day_word = "day" if n == 1 else "days"
        if rec.start_date == rec.end_date:
            dr = rec.start_date.strftime("%a, %b %d")
        else:
            dr = f"{rec.start_date.strftime('%a, %b %d')} -> {rec.end_date.strftime('%a, %b %d')}"
        lines.append(f"  {i:>2}. {dr}  ({n} {day_word})")

        span = date_range(rec.start_date, rec.end_date)
        holidays = sum(1 for d in span if d in optimizer.holidays)
        weekend = sum(1 for d in span if is_weekend(d) and d not in optimizer.holidays)
        parts = [f"{rec.leaves_used} leave"]
        if holidays:
            parts.append(f"{holidays} holiday{'s' if holidays > 1 else ''}")
        if weekend:
            parts.append(f"{weekend} weekend")
        lines.append(f"      {' + '.join(parts)}")
        lines.append(f"      {rec.description}")
        lines.append("")

    lines.append("  Days to request off:")
    for d in result.optimized_leaves:
        lines.append(f"    -> {d.strftime('%A, %B %d, %Y')}")

    return "\n".join(lines)


def format_calendar_view(result: OptimizationResult, optimizer: LeaveOptimizer) -> str:
    """Return a month-by-month calendar highlighting leave and holidays."""
    leave_set = set(result.optimized_leaves)
    holidays = optimizer.holidays

    active_months: set[tuple[int, int]] = set()
    for d in leave_set:
        active_months.add((d.year, d.month))
    for d in holidays:
        active_months.add((d.year, d.month))

    if not active_months:
        return ""

    lines: list[str] = [
        "",
        "  Calendar View",
        "  Legend: L=Leave  H=Holiday",
        "",
    ]

    cal = calendar.Calendar(firstweekday=0)

    for year, month in sorted(active_months):
        lines.append(f"  {calendar.month_name[month]} {year}")
        lines.append("  Mo  Tu  We  Th  Fr  Sa  Su")

        row = ""
        for day_num, weekday in cal.itermonthdays2(year, month):
            if day_num == 0:
                row += "    "
            else:
                d = datetime.date(year, month, day_num)
                if d in holidays:
                    cell = f" {day_num:>2}H"
                elif d in leave_set:
                    cell = f" {day_num:>2}L"
                else:
                    cell = f"  {day_num:>2}"
                row += cell

            if weekday == 6:
                lines.append(row)
                row = ""

        if row.strip():
            lines.append(row)
        lines.append("")

    return "\n".join(lines)
