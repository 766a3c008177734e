"""
Habit service: the single call site for ledger mutations and per-habit
derived values, shared by every router.

Public API
----------
create_habit(db, owner_id, data)                 -> Habit
archive_habit(db, owner_id, habit_id)            -> Habit
get_owned_habit(db, owner_id, habit_id)          -> Habit
list_active_habits(db, owner_id, category_id)    -> list[Habit]
record_increment(db, owner_id, habit_id, day, today) -> CompletionOutcome
record_decrement(db, owner_id, habit_id, day, today) -> CompletionOutcome
summarize_habits(db, habits, today, day)         -> list[HabitSummary]
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Callable, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from habitflow.core.config import settings
from habitflow.core.errors import CategoryNotFoundError, HabitNotFoundError
from habitflow.models.category import Category
from habitflow.models.habit import FrequencyType, Habit, ScheduleMode
from habitflow.services import ledger
from habitflow.services.schedule import describe, is_due, parse_schedule, schedule_for, to_config
from habitflow.services.streaks import current_streak, current_streaks
from habitflow.services.vitality import HealthState, health_state, refresh_health, update_health

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass
class HabitData:
    """Lightweight DTO so the service layer stays schema-agnostic."""
    name: str
    target_count: int = 1
    frequency_type: str = FrequencyType.day.value
    schedule_mode: str = ScheduleMode.flexible.value
    schedule_config: Optional[dict[str, Any]] = None
    start_date: Optional[date] = None
    category_id: Optional[int] = None


@dataclass
class CompletionOutcome:
    count: int
    streak: int
    health: float
    health_state: HealthState


@dataclass
class HabitSummary:
    habit: Habit
    today_count: int
    is_due_today: bool
    current_streak: int
    health: float
    health_state: HealthState
    schedule_description: str


def _ev(v) -> str:
    return v.value if hasattr(v, "value") else str(v)


# ---------------------------------------------------------------------------
# Habit lifecycle
# ---------------------------------------------------------------------------

def get_category(db: Session, owner_id: int, category_id: int) -> Category:
    category = db.get(Category, category_id)
    if category is None or category.owner_id != owner_id or category.archived:
        raise CategoryNotFoundError(category_id)
    return category


def create_habit(db: Session, owner_id: int, data: HabitData) -> Habit:
    """Validate the schedule and persist. Invalid configs never reach the table."""
    definition = parse_schedule(data.schedule_mode, data.schedule_config, data.start_date)
    if data.category_id is not None:
        get_category(db, owner_id, data.category_id)

    habit = Habit(
        owner_id=owner_id,
        category_id=data.category_id,
        name=data.name,
        target_count=data.target_count,
        frequency_type=FrequencyType(_ev(data.frequency_type)),
        schedule_mode=ScheduleMode(_ev(data.schedule_mode)),
        schedule_config=to_config(definition),
        start_date=data.start_date,
        health=settings.HEALTH_INITIAL,
        current_streak=0,
    )
    db.add(habit)
    db.commit()
    db.refresh(habit)
    logger.info("habit created id=%s owner=%s mode=%s", habit.id, owner_id, _ev(habit.schedule_mode))
    return habit


def get_owned_habit(db: Session, owner_id: int, habit_id: int) -> Habit:
    """Active habit owned by owner_id. Missing, foreign and archived all look alike."""
    habit = db.get(Habit, habit_id)
    if habit is None or habit.owner_id != owner_id or habit.archived_at is not None:
        raise HabitNotFoundError(habit_id)
    return habit


def archive_habit(db: Session, owner_id: int, habit_id: int) -> Habit:
    habit = get_owned_habit(db, owner_id, habit_id)
    habit.archived_at = datetime.now(tz=timezone.utc)
    db.commit()
    db.refresh(habit)
    logger.info("habit archived id=%s", habit_id)
    return habit


def list_active_habits(
    db: Session,
    owner_id: int,
    category_id: Optional[int] = None,
) -> list[Habit]:
    q = select(Habit).where(Habit.owner_id == owner_id, Habit.archived_at.is_(None))
    if category_id is not None:
        q = q.where(Habit.category_id == category_id)
    return list(db.execute(q.order_by(Habit.id)).scalars())


# ---------------------------------------------------------------------------
# Ledger mutations + synchronous recompute
# ---------------------------------------------------------------------------

def _record(
    db: Session,
    owner_id: int,
    habit_id: int,
    day: date,
    today: date,
    mutate: Callable[[Session, int, date], int],
) -> CompletionOutcome:
    """
    Mutate the ledger for `day`, then recompute. `today` is the user's real
    calendar date: health is settled against it and the cached streak only
    tracks it, whatever day was edited.
    """
    habit = get_owned_habit(db, owner_id, habit_id)
    count = mutate(db, habit.id, day)

    streak = current_streak(db, habit, day)
    if day == today:
        habit.current_streak = streak
    update_health(db, habit, today)
    db.commit()

    return CompletionOutcome(
        count=count,
        streak=streak,
        health=habit.health,
        health_state=health_state(habit.health),
    )


def record_increment(
    db: Session, owner_id: int, habit_id: int, day: date, today: date
) -> CompletionOutcome:
    return _record(db, owner_id, habit_id, day, today, ledger.increment)


def record_decrement(
    db: Session, owner_id: int, habit_id: int, day: date, today: date
) -> CompletionOutcome:
    return _record(db, owner_id, habit_id, day, today, ledger.decrement)


# ---------------------------------------------------------------------------
# Listing payloads
# ---------------------------------------------------------------------------

def summarize_habits(
    db: Session,
    habits: list[Habit],
    today: date,
    day: Optional[date] = None,
) -> list[HabitSummary]:
    """
    Per-habit listing values as of `day` (defaults to `today`).

    Health is refreshed against the real `today` only, for habits not yet
    checked on it. The cached streak column is brought in line only when
    the listing is for today. Looking at another day never moves stored
    state.
    """
    if not habits:
        return []
    day = day or today

    refresh_health(db, habits, today)
    streaks = current_streaks(db, habits, day)
    if day == today:
        for habit in habits:
            habit.current_streak = streaks[habit.id]
    db.commit()

    on_day = ledger.counts_for_range(db, [h.id for h in habits], day, day)
    summaries = []
    for habit in habits:
        definition = schedule_for(habit)
        summaries.append(HabitSummary(
            habit=habit,
            today_count=on_day.get(habit.id, day),
            is_due_today=is_due(definition, day),
            current_streak=streaks[habit.id],
            health=habit.health,
            health_state=health_state(habit.health),
            schedule_description=describe(
                definition, habit.target_count, _ev(habit.frequency_type)
            ),
        ))
    return summaries
