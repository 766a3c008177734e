"""
Vitality (health) model.

Each habit carries a 0-100 health score that is brought up to date at
most once per calendar day. An update folds every *due* day that has
ended since the previous check into the score:

  met     health = min(100, health + HEALTH_RECOVERY)
  missed  health = max(0,   health - HEALTH_DECAY)

Non-due days have no effect. A single miss costs more than a single
success earns back, so a habit drifts toward "at risk" unless it is kept.

Catch-up window
---------------
`last_health_check_at` is the date of the previous check; every day
before it is settled. A check on `today` folds the due days in
[last_health_check_at, today) and stores `today`. Today itself stays open
until tomorrow's check, so a completion logged after a morning check is
still counted.

A habit that was never checked starts at its start_date (inclusive);
without a start_date there is nothing to settle yet.

`today` is always the requesting user's calendar date, never a date a
client asked to look at.

States
------
  thriving  health >= 80
  steady    50 <= health < 80
  at_risk   health < 50      (same threshold as the "habits at risk" count)
"""
from __future__ import annotations

import enum
import logging
from collections.abc import Iterable, Sequence
from datetime import date, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from habitflow.core.config import settings
from habitflow.models.habit import Habit
from habitflow.services.ledger import CompletionCounts, counts_for_range
from habitflow.services.schedule import is_due, schedule_for

logger = logging.getLogger(__name__)

HEALTH_MIN = 0
HEALTH_MAX = 100
THRIVING_THRESHOLD = 80
AT_RISK_THRESHOLD = 50


class HealthState(str, enum.Enum):
    thriving = "thriving"
    steady = "steady"
    at_risk = "at_risk"


def health_state(health: float) -> HealthState:
    if health >= THRIVING_THRESHOLD:
        return HealthState.thriving
    if health >= AT_RISK_THRESHOLD:
        return HealthState.steady
    return HealthState.at_risk


def clamp_health(health: float) -> float:
    return max(HEALTH_MIN, min(HEALTH_MAX, health))


def apply_days(
    health: float,
    outcomes: Iterable[bool],
    recovery: Optional[int] = None,
    decay: Optional[int] = None,
) -> float:
    """Fold met (True) / missed (False) due-day outcomes into a health score."""
    recovery = settings.HEALTH_RECOVERY if recovery is None else recovery
    decay = settings.HEALTH_DECAY if decay is None else decay

    health = clamp_health(health)
    for met in outcomes:
        if met:
            health = min(HEALTH_MAX, health + recovery)
        else:
            health = max(HEALTH_MIN, health - decay)
    return health


# ---------------------------------------------------------------------------
# Catch-up window
# ---------------------------------------------------------------------------

def _window_start(habit: Habit, today: date) -> Optional[date]:
    """First unsettled day, or None when the habit was already checked today."""
    last = habit.last_health_check_at
    if last is None:
        if habit.start_date is not None and habit.start_date < today:
            return habit.start_date
        return today
    if last >= today:
        return None
    return last


def needs_update(habit: Habit, today: date) -> bool:
    return _window_start(habit, today) is not None


def due_outcomes(habit: Habit, start: date, today: date, counts: CompletionCounts) -> list[bool]:
    """Met/missed flag for each due day in [start, today), oldest first."""
    definition = schedule_for(habit)
    outcomes = []
    day = start
    while day < today:
        if is_due(definition, day):
            outcomes.append(counts.get(habit.id, day) >= habit.target_count)
        day += timedelta(days=1)
    return outcomes


def _apply(habit: Habit, today: date, counts: CompletionCounts) -> None:
    start = _window_start(habit, today)
    if start is None:
        return
    outcomes = due_outcomes(habit, start, today, counts)
    before = habit.health
    habit.health = apply_days(before, outcomes)
    habit.last_health_check_at = today
    logger.debug(
        "health updated habit=%s settled=%s..%s due_days=%s health=%s->%s",
        habit.id, start, today - timedelta(days=1), len(outcomes), before, habit.health,
    )


# ---------------------------------------------------------------------------
# Public: DB-backed updates (flush only; caller commits)
# ---------------------------------------------------------------------------

def update_health(db: Session, habit: Habit, today: date) -> Habit:
    """Bring one habit's health up to date. Idempotent per calendar day."""
    refresh_health(db, [habit], today)
    return habit


def refresh_health(db: Session, habits: Sequence[Habit], today: date) -> int:
    """
    Update every habit not yet checked today off one batched ledger read.
    Returns the number of habits that changed.
    """
    stale = [h for h in habits if needs_update(h, today)]
    if not stale:
        return 0

    start = min(_window_start(h, today) for h in stale)
    counts = counts_for_range(db, [h.id for h in stale], start, today - timedelta(days=1))
    for habit in stale:
        _apply(habit, today, counts)
    db.flush()
    return len(stale)
