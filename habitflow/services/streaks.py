"""
Streak Calculator.

A streak is the number of consecutive *due* days, walking backward from a
reference date, on which the habit met its target_count. Non-due days are
skipped: they neither extend nor break the streak.

Grace rule
----------
"Today" is still correctable, so the current streak falls back to the
walk from yesterday when the walk from today yields 0. Historical streaks
(as of an arbitrary past date) never use the grace rule.

Walk bounds
-----------
The walk stops at the habit's start_date and after
STREAK_MAX_LOOKBACK_DAYS calendar days, whichever comes first. This keeps
a schedule whose due days are sparse from scanning unbounded history and
lets the whole walk run off a single `counts_for_range` read.

Public API
----------
streak_as_of(habit, as_of, counts)          -> int   (pure, no grace)
current_streak(db, habit, as_of)            -> int   (grace rule)
historical_streak(db, habit, as_of)         -> int
current_streaks(db, habits, as_of)          -> dict[int, int]
perfect_day_streak(habits, as_of, counts)   -> int
"""
from __future__ import annotations

from collections.abc import Sequence
from datetime import date, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from habitflow.core.config import settings
from habitflow.models.habit import Habit
from habitflow.services.ledger import CompletionCounts, counts_for_range
from habitflow.services.schedule import is_due, schedule_for

_ONE_DAY = timedelta(days=1)


def _walk_floor(habit: Habit, as_of: date, lookback_days: int) -> date:
    floor = as_of - timedelta(days=lookback_days)
    if habit.start_date is not None and habit.start_date > floor:
        floor = habit.start_date
    return floor


def _window_for(as_of: date, lookback_days: int) -> tuple[date, date]:
    # One extra day back for the grace walk that starts at as_of - 1.
    start = as_of - timedelta(days=lookback_days + 1)
    return start, as_of


# ---------------------------------------------------------------------------
# Core walk (pure)
# ---------------------------------------------------------------------------

def streak_as_of(
    habit: Habit,
    as_of: date,
    counts: CompletionCounts,
    lookback_days: Optional[int] = None,
) -> int:
    """Step 1 of the streak algorithm: backward walk from as_of, no grace."""
    lookback = settings.STREAK_MAX_LOOKBACK_DAYS if lookback_days is None else lookback_days
    definition = schedule_for(habit)
    floor = _walk_floor(habit, as_of, lookback)

    streak = 0
    day = as_of
    while day >= floor:
        if is_due(definition, day):
            if counts.get(habit.id, day) < habit.target_count:
                break
            streak += 1
        day -= _ONE_DAY
    return streak


def _with_grace(habit: Habit, as_of: date, counts: CompletionCounts, lookback: int) -> int:
    streak = streak_as_of(habit, as_of, counts, lookback)
    if streak == 0:
        streak = streak_as_of(habit, as_of - _ONE_DAY, counts, lookback)
    return streak


# ---------------------------------------------------------------------------
# DB-backed entry points
# ---------------------------------------------------------------------------

def current_streak(db: Session, habit: Habit, as_of: date) -> int:
    """Streak shown to the user: what they keep if they still complete as_of."""
    return current_streaks(db, [habit], as_of)[habit.id]


def historical_streak(db: Session, habit: Habit, as_of: date) -> int:
    lookback = settings.STREAK_MAX_LOOKBACK_DAYS
    start, end = _window_for(as_of, lookback)
    counts = counts_for_range(db, [habit.id], start, end)
    return streak_as_of(habit, as_of, counts, lookback)


def current_streaks(db: Session, habits: Sequence[Habit], as_of: date) -> dict[int, int]:
    """Grace-rule streaks for many habits off one batched ledger read."""
    if not habits:
        return {}
    lookback = settings.STREAK_MAX_LOOKBACK_DAYS
    start, end = _window_for(as_of, lookback)
    counts = counts_for_range(db, [h.id for h in habits], start, end)
    return {h.id: _with_grace(h, as_of, counts, lookback) for h in habits}


# ---------------------------------------------------------------------------
# Aggregate streak across a habit set
# ---------------------------------------------------------------------------

def perfect_day_streak(
    habits: Sequence[Habit],
    as_of: date,
    counts: CompletionCounts,
) -> int:
    """
    Consecutive days ending at as_of on which every habit met its target.

    Bounded by the window `counts` was read for. 0 for an empty habit set.
    """
    if not habits:
        return 0
    streak = 0
    day = as_of
    while day >= counts.start:
        if not all(counts.get(h.id, day) >= h.target_count for h in habits):
            break
        streak += 1
        day -= _ONE_DAY
    return streak
