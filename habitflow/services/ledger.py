"""
Completion Ledger: per-(habit, day) completion counters.

Public API
----------
increment(db, habit_id, day)                   -> int    (atomic upsert)
decrement(db, habit_id, day)                   -> int    (row-locked, delete on zero)
count_for(db, habit_id, day)                   -> int
counts_for_range(db, habit_ids, start, end)    -> CompletionCounts   (one grouped read)
total_completions(db, habit_ids, start, end)   -> int

increment/decrement flush but do not commit; the caller owns the
transaction so the streak and health recompute land in the same commit.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from habitflow.models.completion import HabitCompletion

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Batched read result
# ---------------------------------------------------------------------------

@dataclass
class CompletionCounts:
    """In-memory index of a batched read. Missing pairs count as 0."""
    start: date
    end: date
    by_key: dict[tuple[int, date], int] = field(default_factory=dict)

    def get(self, habit_id: int, day: date) -> int:
        return self.by_key.get((habit_id, day), 0)

    def covers(self, start: date, end: date) -> bool:
        return self.start <= start and end <= self.end

    def __len__(self) -> int:
        return len(self.by_key)


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------

def _insert_for(db: Session):
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        return pg_insert
    if dialect == "sqlite":
        return sqlite_insert
    raise NotImplementedError(f"Completion upsert not supported on {dialect!r}")


def increment(db: Session, habit_id: int, day: date) -> int:
    """
    Add one completion for (habit_id, day) and return the new count.

    INSERT ... ON CONFLICT DO UPDATE SET count = count + 1 is a single
    statement, so two concurrent taps both land.
    """
    insert = _insert_for(db)
    stmt = insert(HabitCompletion).values(habit_id=habit_id, day=day, count=1)
    stmt = stmt.on_conflict_do_update(
        index_elements=[HabitCompletion.habit_id, HabitCompletion.day],
        set_={
            "count": HabitCompletion.count + 1,
            "updated_at": func.now(),
        },
    ).returning(HabitCompletion.count)

    new_count = db.execute(stmt).scalar_one()
    # The ORM identity map may hold a stale row from an earlier read.
    db.expire_all()
    logger.info("completion incremented habit=%s day=%s count=%s", habit_id, day, new_count)
    return new_count


def decrement(db: Session, habit_id: int, day: date) -> int:
    """
    Remove one completion for (habit_id, day) and return the new count.

    Absent row -> 0, no-op. A row at count 1 is deleted rather than kept at 0.
    """
    record = db.execute(
        select(HabitCompletion)
        .where(HabitCompletion.habit_id == habit_id, HabitCompletion.day == day)
        .with_for_update()
    ).scalar_one_or_none()

    if record is None:
        return 0

    if record.count > 1:
        record.count = HabitCompletion.count - 1
        db.flush()
        db.refresh(record)
        new_count = record.count
    else:
        db.delete(record)
        db.flush()
        new_count = 0

    logger.info("completion decremented habit=%s day=%s count=%s", habit_id, day, new_count)
    return new_count


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------

def count_for(db: Session, habit_id: int, day: date) -> int:
    count = db.execute(
        select(HabitCompletion.count)
        .where(HabitCompletion.habit_id == habit_id, HabitCompletion.day == day)
    ).scalar_one_or_none()
    return count or 0


def counts_for_range(
    db: Session,
    habit_ids: Iterable[int],
    start: date,
    end: date,
) -> CompletionCounts:
    """Every (habit_id, day) count in [start, end] for the given habits, in one query."""
    ids = list(habit_ids)
    counts = CompletionCounts(start=start, end=end)
    if not ids or start > end:
        return counts

    rows = db.execute(
        select(HabitCompletion.habit_id, HabitCompletion.day, HabitCompletion.count)
        .where(
            HabitCompletion.habit_id.in_(ids),
            HabitCompletion.day >= start,
            HabitCompletion.day <= end,
        )
    ).all()
    for habit_id, day, count in rows:
        counts.by_key[(habit_id, day)] = count
    return counts


def total_completions(
    db: Session,
    habit_ids: Iterable[int],
    start: date,
    end: date,
) -> int:
    ids = list(habit_ids)
    if not ids:
        return 0
    total = db.execute(
        select(func.coalesce(func.sum(HabitCompletion.count), 0))
        .where(
            HabitCompletion.habit_id.in_(ids),
            HabitCompletion.day >= start,
            HabitCompletion.day <= end,
        )
    ).scalar_one()
    return int(total)
