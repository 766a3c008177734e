"""
Schedule Evaluator: is a habit due on a given calendar date?

Schedule definitions
--------------------
  Flexible       always due; target_count is checked per day
  SpecificDays   due iff the weekday is in days_of_week (0 = Sunday … 6 = Saturday)
  Interval       due every N days / weeks / months counted from anchor_date

Dates before the anchor are valid input: offsets use Python's floor
modulo, which is never negative for a positive divisor.

Public API
----------
parse_schedule(mode, config, start_date)   -> ScheduleDefinition   (write-time validation)
schedule_for(habit)                        -> ScheduleDefinition   (read path, trusts stored config)
is_due(definition, day)                    -> bool
describe(definition, target_count, freq)   -> str
"""
from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date
from typing import Any, Optional, Union

from habitflow.core.errors import InvalidScheduleError
from habitflow.models.habit import Habit, ScheduleMode


INTERVAL_UNITS = ("days", "weeks", "months")

_DAY_ABBR = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")
_NAMED_DAY_SETS = {
    frozenset({1, 2, 3, 4, 5}): "Weekdays",
    frozenset({0, 6}): "Weekends",
    frozenset({1, 3, 5}): "MWF",
    frozenset({2, 4}): "T/Th",
}


# ---------------------------------------------------------------------------
# Definitions
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Flexible:
    pass


@dataclass(frozen=True)
class SpecificDays:
    days_of_week: frozenset[int]


@dataclass(frozen=True)
class Interval:
    interval_days: int
    anchor_date: date
    interval_unit: str = "days"


ScheduleDefinition = Union[Flexible, SpecificDays, Interval]


def weekday_index(day: date) -> int:
    """0 = Sunday … 6 = Saturday."""
    return day.isoweekday() % 7


# ---------------------------------------------------------------------------
# Evaluation
# ---------------------------------------------------------------------------

def is_due(definition: ScheduleDefinition, day: date) -> bool:
    if isinstance(definition, Flexible):
        return True
    if isinstance(definition, SpecificDays):
        return weekday_index(day) in definition.days_of_week
    if isinstance(definition, Interval):
        return _interval_due(definition, day)
    raise TypeError(f"Unknown schedule definition: {definition!r}")


def _interval_due(definition: Interval, day: date) -> bool:
    anchor = definition.anchor_date
    every = definition.interval_days

    if definition.interval_unit == "weeks":
        if day.weekday() != anchor.weekday():
            return False
        weeks = (day - anchor).days // 7
        return weeks % every == 0

    if definition.interval_unit == "months":
        # Anchors on the 29th-31st fall back to the last day of short months.
        last_day = calendar.monthrange(day.year, day.month)[1]
        if day.day != min(anchor.day, last_day):
            return False
        months = (day.year * 12 + day.month) - (anchor.year * 12 + anchor.month)
        return months % every == 0

    return (day - anchor).days % every == 0


# ---------------------------------------------------------------------------
# Write-time parsing / validation
# ---------------------------------------------------------------------------

def parse_schedule(
    mode: str,
    config: Optional[dict[str, Any]],
    start_date: Optional[date] = None,
) -> ScheduleDefinition:
    """
    Build a ScheduleDefinition from a habit's mode + JSON config.

    Raises InvalidScheduleError for anything incomplete or out of range.
    Never fills a missing required value with a default, except the
    interval anchor which falls back to the habit's start_date.
    """
    config = config or {}
    mode = mode.value if isinstance(mode, ScheduleMode) else str(mode)

    if mode == ScheduleMode.flexible.value:
        return Flexible()

    if mode == ScheduleMode.specific_days.value:
        days = config.get("days_of_week")
        if not isinstance(days, (list, tuple, set, frozenset)) or not days:
            raise InvalidScheduleError(
                "specific_days requires a non-empty days_of_week list.", mode
            )
        if not all(_is_int(d) and 0 <= d <= 6 for d in days):
            raise InvalidScheduleError(
                "days_of_week must be integers between 0 (Sunday) and 6 (Saturday).", mode
            )
        return SpecificDays(days_of_week=frozenset(days))

    if mode == ScheduleMode.interval.value:
        every = config.get("interval_days")
        if every is None:
            raise InvalidScheduleError("interval requires interval_days.", mode)
        if not _is_int(every) or every < 1:
            raise InvalidScheduleError("interval_days must be a positive integer.", mode)

        unit = config.get("interval_unit") or "days"
        if unit not in INTERVAL_UNITS:
            raise InvalidScheduleError(
                f"interval_unit must be one of {', '.join(INTERVAL_UNITS)}.", mode
            )

        anchor = _parse_anchor(config.get("anchor_date"), mode) or start_date
        if anchor is None:
            raise InvalidScheduleError(
                "interval requires anchor_date (or a habit start_date).", mode
            )
        return Interval(interval_days=every, anchor_date=anchor, interval_unit=unit)

    raise InvalidScheduleError(f"Unknown schedule_mode {mode!r}.", mode)


def to_config(definition: ScheduleDefinition) -> dict[str, Any]:
    """Canonical JSON form stored in habits.schedule_config."""
    if isinstance(definition, SpecificDays):
        return {"days_of_week": sorted(definition.days_of_week)}
    if isinstance(definition, Interval):
        return {
            "interval_days": definition.interval_days,
            "interval_unit": definition.interval_unit,
            "anchor_date": definition.anchor_date.isoformat(),
        }
    return {}


def schedule_for(habit: Habit) -> ScheduleDefinition:
    """Definition for a persisted habit. Stored configs were validated on write."""
    return parse_schedule(habit.schedule_mode, habit.schedule_config, habit.start_date)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _parse_anchor(raw: Any, mode: str) -> Optional[date]:
    if raw is None or raw == "":
        return None
    if isinstance(raw, date):
        return raw
    try:
        return date.fromisoformat(str(raw))
    except ValueError as exc:
        raise InvalidScheduleError(f"anchor_date {raw!r} is not an ISO date.", mode) from exc


# ---------------------------------------------------------------------------
# Display
# ---------------------------------------------------------------------------

def describe(
    definition: ScheduleDefinition,
    target_count: int = 1,
    frequency_type: str = "day",
) -> str:
    """Short human label, e.g. "3x/week", "MWF", "Every other day"."""
    if isinstance(definition, Flexible):
        freq = frequency_type.value if hasattr(frequency_type, "value") else frequency_type
        return f"{target_count}x/{freq}"

    if isinstance(definition, SpecificDays):
        named = _NAMED_DAY_SETS.get(definition.days_of_week)
        if named:
            return named
        return "/".join(_DAY_ABBR[d] for d in sorted(definition.days_of_week))

    n = definition.interval_days
    if definition.interval_unit == "weeks":
        if n == 1:
            return "Weekly"
        return "Biweekly" if n == 2 else f"Every {n} weeks"
    if definition.interval_unit == "months":
        return "Monthly" if n == 1 else f"Every {n} months"
    if n == 1:
        return "Daily"
    return "Every other day" if n == 2 else f"Every {n} days"
