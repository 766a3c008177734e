"""
Tests for the Streak Calculator.

Pure walk tests build `CompletionCounts` by hand; the DB-backed tests go
through the ledger so the batched read is exercised too.

Calendar reference: 2024-01-01 is a Monday.
"""
from __future__ import annotations

from datetime import date, timedelta

from habitflow.models.habit import Habit
from habitflow.services import ledger
from habitflow.services.habits import record_increment, summarize_habits
from habitflow.services.ledger import CompletionCounts
from habitflow.services.streaks import (
    current_streak,
    current_streaks,
    historical_streak,
    perfect_day_streak,
    streak_as_of,
)


def _habit(
    habit_id: int = 1,
    target_count: int = 1,
    schedule_mode: str = "flexible",
    schedule_config: dict | None = None,
    start_date: date | None = None,
) -> Habit:
    return Habit(
        id=habit_id,
        owner_id=1,
        name=f"habit-{habit_id}",
        target_count=target_count,
        frequency_type="day",
        schedule_mode=schedule_mode,
        schedule_config=schedule_config or {},
        start_date=start_date,
        health=100,
    )


def _counts(entries: dict[tuple[int, date], int]) -> CompletionCounts:
    return CompletionCounts(start=date(2023, 1, 1), end=date(2024, 12, 31), by_key=dict(entries))


def _days(start: date, n: int) -> list[date]:
    return [start + timedelta(days=i) for i in range(n)]


# ---------------------------------------------------------------------------
# Pure walk
# ---------------------------------------------------------------------------

class TestStreakWalk:
    def test_no_completions_is_zero(self):
        assert streak_as_of(_habit(), date(2024, 1, 10), _counts({})) == 0

    def test_consecutive_days_counted(self):
        counts = _counts({(1, d): 1 for d in _days(date(2024, 1, 1), 3)})
        assert streak_as_of(_habit(), date(2024, 1, 3), counts) == 3

    def test_gap_stops_walk(self):
        counts = _counts({
            (1, date(2024, 1, 1)): 1,
            (1, date(2024, 1, 3)): 1,
            (1, date(2024, 1, 4)): 1,
        })
        assert streak_as_of(_habit(), date(2024, 1, 4), counts) == 2

    def test_below_target_does_not_count(self):
        counts = _counts({
            (1, date(2024, 1, 1)): 2,
            (1, date(2024, 1, 2)): 1,
            (1, date(2024, 1, 3)): 2,
        })
        assert streak_as_of(_habit(target_count=2), date(2024, 1, 3), counts) == 1

    def test_non_due_days_are_skipped(self):
        # Mon/Wed/Fri habit; Tuesday and Thursday have nothing recorded.
        habit = _habit(schedule_mode="specific_days", schedule_config={"days_of_week": [1, 3, 5]})
        counts = _counts({
            (1, date(2024, 1, 1)): 1,
            (1, date(2024, 1, 3)): 1,
            (1, date(2024, 1, 5)): 1,
        })
        assert streak_as_of(habit, date(2024, 1, 5), counts) == 3
        # Saturday is not due either: the streak carries through it.
        assert streak_as_of(habit, date(2024, 1, 6), counts) == 3

    def test_interval_schedule_counts_only_due_days(self):
        habit = _habit(
            schedule_mode="interval",
            schedule_config={"interval_days": 2, "anchor_date": "2024-01-01"},
        )
        counts = _counts({(1, d): 1 for d in (date(2024, 1, 1), date(2024, 1, 3), date(2024, 1, 5))})
        assert streak_as_of(habit, date(2024, 1, 6), counts) == 3

    def test_walk_stops_at_start_date(self):
        habit = _habit(start_date=date(2024, 1, 3))
        counts = _counts({(1, d): 1 for d in _days(date(2024, 1, 1), 5)})
        assert streak_as_of(habit, date(2024, 1, 5), counts) == 3

    def test_walk_bounded_by_lookback(self):
        counts = _counts({(1, d): 1 for d in _days(date(2024, 1, 1), 30)})
        assert streak_as_of(_habit(), date(2024, 1, 30), counts, lookback_days=9) == 10

    def test_schedule_with_rare_due_days_terminates(self):
        habit = _habit(
            schedule_mode="interval",
            schedule_config={"interval_days": 12, "interval_unit": "months", "anchor_date": "2020-02-29"},
        )
        assert streak_as_of(habit, date(2024, 6, 1), _counts({})) == 0


# ---------------------------------------------------------------------------
# DB-backed: grace rule and batching
# ---------------------------------------------------------------------------

class TestCurrentStreak:
    def test_flexible_three_days(self, db, make_habit):
        habit = make_habit()
        for d in _days(date(2024, 1, 1), 3):
            ledger.increment(db, habit.id, d)
        db.commit()
        assert current_streak(db, habit, date(2024, 1, 3)) == 3

    def test_grace_rule_keeps_yesterdays_streak(self, db, make_habit):
        habit = make_habit()
        for d in _days(date(2024, 1, 1), 3):
            ledger.increment(db, habit.id, d)
        db.commit()

        assert current_streak(db, habit, date(2024, 1, 4)) == 3
        assert ledger.count_for(db, habit.id, date(2024, 1, 4)) == 0

    def test_historical_streak_has_no_grace(self, db, make_habit):
        habit = make_habit()
        for d in _days(date(2024, 1, 1), 3):
            ledger.increment(db, habit.id, d)
        db.commit()
        assert historical_streak(db, habit, date(2024, 1, 4)) == 0
        assert historical_streak(db, habit, date(2024, 1, 2)) == 2

    def test_grace_only_reaches_back_one_day(self, db, make_habit):
        habit = make_habit()
        for d in _days(date(2024, 1, 1), 3):
            ledger.increment(db, habit.id, d)
        db.commit()
        assert current_streak(db, habit, date(2024, 1, 5)) == 0

    def test_tuesday_miss_does_not_break_mwf_streak(self, db, make_habit):
        habit = make_habit(schedule_mode="specific_days", schedule_config={"days_of_week": [1, 3, 5]})
        for d in (date(2024, 1, 1), date(2024, 1, 3), date(2024, 1, 5), date(2024, 1, 8)):
            ledger.increment(db, habit.id, d)
        db.commit()
        # 2024-01-09 is a Tuesday with nothing recorded.
        assert current_streak(db, habit, date(2024, 1, 9)) == 4

    def test_current_streaks_for_many_habits(self, db, make_habit):
        a = make_habit("a")
        b = make_habit("b", target_count=2)
        for d in _days(date(2024, 2, 1), 2):
            ledger.increment(db, a.id, d)
            ledger.increment(db, b.id, d)
        ledger.increment(db, b.id, date(2024, 2, 2))
        db.commit()

        streaks = current_streaks(db, [a, b], date(2024, 2, 2))
        assert streaks == {a.id: 2, b.id: 1}

    def test_current_streaks_empty(self, db):
        assert current_streaks(db, [], date(2024, 1, 1)) == {}


# ---------------------------------------------------------------------------
# Perfect-day streak
# ---------------------------------------------------------------------------

class TestPerfectDayStreak:
    def test_empty_set_is_zero(self):
        assert perfect_day_streak([], date(2024, 1, 5), _counts({})) == 0

    def test_all_habits_must_meet_target(self):
        a, b = _habit(1), _habit(2)
        counts = _counts({
            (1, date(2024, 1, 3)): 1, (2, date(2024, 1, 3)): 1,
            (1, date(2024, 1, 4)): 1, (2, date(2024, 1, 4)): 1,
            (1, date(2024, 1, 2)): 1,
        })
        assert perfect_day_streak([a, b], date(2024, 1, 4), counts) == 2

    def test_stops_at_window_start(self):
        a = _habit(1)
        counts = CompletionCounts(
            start=date(2024, 1, 3),
            end=date(2024, 1, 5),
            by_key={(1, d): 1 for d in _days(date(2024, 1, 1), 5)},
        )
        assert perfect_day_streak([a], date(2024, 1, 5), counts) == 3


# ---------------------------------------------------------------------------
# Cached current_streak column
# ---------------------------------------------------------------------------

class TestCachedStreak:
    def test_past_day_edit_leaves_cached_streak(self, db, make_habit, owner_id):
        habit = make_habit()
        today = date(2024, 1, 3)
        for d in _days(date(2024, 1, 1), 3):
            record_increment(db, owner_id, habit.id, d, today)
        assert habit.current_streak == 3

        outcome = record_increment(db, owner_id, habit.id, date(2023, 12, 20), today)
        assert outcome.streak == 1
        assert habit.current_streak == 3

    def test_listing_another_day_leaves_cached_streak(self, db, make_habit, owner_id):
        habit = make_habit()
        today = date(2024, 1, 3)
        for d in _days(date(2024, 1, 1), 3):
            record_increment(db, owner_id, habit.id, d, today)

        [summary] = summarize_habits(db, [habit], today, day=date(2023, 12, 25))
        assert summary.current_streak == 0
        assert habit.current_streak == 3
