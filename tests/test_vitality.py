"""
Tests for the Vitality (health) model.

Defaults: HEALTH_RECOVERY = 10, HEALTH_DECAY = 15.
"""
from __future__ import annotations

import random
from datetime import date, timedelta

import pytest

from habitflow.services import ledger
from habitflow.services.habits import record_increment, summarize_habits
from habitflow.services.vitality import (
    HealthState,
    apply_days,
    health_state,
    refresh_health,
    update_health,
)


class TestApplyDays:
    def test_met_day_recovers(self):
        assert apply_days(50, [True], recovery=10, decay=15) == 60

    def test_missed_day_decays(self):
        assert apply_days(50, [False], recovery=10, decay=15) == 35

    def test_caps_at_100(self):
        assert apply_days(95, [True, True], recovery=10, decay=15) == 100

    def test_floors_at_0(self):
        assert apply_days(10, [False, False], recovery=10, decay=15) == 0

    def test_order_matters_through_clamping(self):
        assert apply_days(100, [True, False], recovery=10, decay=15) == 85
        assert apply_days(100, [False, True], recovery=10, decay=15) == 95

    def test_random_sequences_stay_in_bounds(self):
        rng = random.Random(7)
        for _ in range(200):
            outcomes = [rng.random() < 0.5 for _ in range(rng.randint(0, 40))]
            start = rng.randint(0, 100)
            assert 0 <= apply_days(start, outcomes) <= 100


class TestHealthState:
    @pytest.mark.parametrize("health,state", [
        (100, HealthState.thriving),
        (80, HealthState.thriving),
        (79, HealthState.steady),
        (50, HealthState.steady),
        (49, HealthState.at_risk),
        (0, HealthState.at_risk),
    ])
    def test_thresholds(self, health, state):
        assert health_state(health) == state


class TestUpdateHealth:
    def test_first_check_without_start_date_settles_nothing(self, db, make_habit):
        habit = make_habit()
        update_health(db, habit, date(2024, 1, 10))
        db.commit()
        assert habit.health == 100
        assert habit.last_health_check_at == date(2024, 1, 10)

    def test_first_check_starts_at_start_date(self, db, make_habit):
        habit = make_habit(start_date=date(2024, 1, 1))
        ledger.increment(db, habit.id, date(2024, 1, 1))
        db.commit()
        update_health(db, habit, date(2024, 1, 3))
        db.commit()
        # 01-01 met (capped), 01-02 missed; 01-03 is still open
        assert habit.health == 85

    def test_same_day_is_idempotent(self, db, make_habit):
        habit = make_habit(start_date=date(2024, 1, 1))
        update_health(db, habit, date(2024, 1, 10))
        first = habit.health
        update_health(db, habit, date(2024, 1, 10))
        update_health(db, habit, date(2024, 1, 10))
        assert habit.health == first

    def test_catch_up_covers_every_day_since_last_check(self, db, make_habit):
        habit = make_habit()
        habit.health = 50
        habit.last_health_check_at = date(2024, 1, 1)
        db.commit()
        for d in (date(2024, 1, 1), date(2024, 1, 2), date(2024, 1, 4)):
            ledger.increment(db, habit.id, d)
        db.commit()

        update_health(db, habit, date(2024, 1, 4))
        db.commit()
        # 01-01 met (+10), 01-02 met (+10), 01-03 missed (-15)
        assert habit.health == 55
        assert habit.last_health_check_at == date(2024, 1, 4)

        update_health(db, habit, date(2024, 1, 5))
        assert habit.health == 65

    def test_today_stays_open_after_a_morning_check(self, db, make_habit):
        habit = make_habit()
        habit.health = 70
        habit.last_health_check_at = date(2024, 1, 5)
        db.commit()

        update_health(db, habit, date(2024, 1, 6))
        assert habit.health == 55  # 01-05 missed
        ledger.increment(db, habit.id, date(2024, 1, 6))
        db.commit()
        update_health(db, habit, date(2024, 1, 6))
        assert habit.health == 55

        update_health(db, habit, date(2024, 1, 7))
        assert habit.health == 65

    def test_viewing_before_logging_every_day_keeps_full_health(self, db, make_habit):
        habit = make_habit(start_date=date(2032, 1, 1))
        for d in (date(2032, 1, 1) + timedelta(days=i) for i in range(10)):
            update_health(db, habit, d)
            ledger.increment(db, habit.id, d)
            update_health(db, habit, d)
            db.commit()
            assert habit.health == 100
        update_health(db, habit, date(2032, 1, 11))
        assert habit.health == 100

    def test_non_due_days_have_no_effect(self, db, make_habit):
        habit = make_habit(schedule_mode="specific_days", schedule_config={"days_of_week": [1, 3, 5]})
        habit.health = 70
        habit.last_health_check_at = date(2024, 1, 1)  # Monday
        db.commit()
        # Mon 01-01 met, Tue 01-02 not due, Wed 01-03 met.
        ledger.increment(db, habit.id, date(2024, 1, 1))
        ledger.increment(db, habit.id, date(2024, 1, 3))
        db.commit()
        update_health(db, habit, date(2024, 1, 4))
        assert habit.health == 90

    def test_target_count_gates_recovery(self, db, make_habit):
        habit = make_habit(target_count=2)
        habit.health = 60
        habit.last_health_check_at = date(2024, 1, 2)
        db.commit()
        ledger.increment(db, habit.id, date(2024, 1, 2))
        db.commit()
        update_health(db, habit, date(2024, 1, 3))
        assert habit.health == 45

    def test_check_date_after_today_is_left_alone(self, db, make_habit):
        habit = make_habit()
        habit.health = 70
        habit.last_health_check_at = date(2024, 1, 10)
        db.commit()
        update_health(db, habit, date(2024, 1, 5))
        assert habit.health == 70
        assert habit.last_health_check_at == date(2024, 1, 10)

    def test_habit_without_completions_never_raises(self, db, make_habit):
        habit = make_habit(start_date=date(2023, 1, 1))
        update_health(db, habit, date(2024, 1, 1))
        assert habit.health == 0

    def test_any_call_order_stays_in_bounds(self, db, make_habit):
        habit = make_habit(start_date=date(2024, 3, 1))
        rng = random.Random(11)
        for d in (date(2024, 3, 1) + timedelta(days=i) for i in range(40)):
            if rng.random() < 0.6:
                ledger.increment(db, habit.id, d)
        db.commit()
        for offset in sorted(rng.randint(0, 39) for _ in range(15)):
            update_health(db, habit, date(2024, 3, 1) + timedelta(days=offset))
            assert 0 <= habit.health <= 100


class TestRefreshHealth:
    def test_only_stale_habits_are_updated(self, db, make_habit):
        fresh = make_habit("fresh")
        stale = make_habit("stale")
        fresh.last_health_check_at = date(2024, 2, 1)
        fresh.health = 90
        stale.last_health_check_at = date(2024, 1, 31)
        stale.health = 90
        db.commit()

        changed = refresh_health(db, [fresh, stale], date(2024, 2, 1))
        assert changed == 1
        assert fresh.health == 90
        assert stale.health == 75

    def test_no_habits(self, db):
        assert refresh_health(db, [], date(2024, 2, 1)) == 0


class TestListingDates:
    def test_future_day_listing_leaves_health_alone(self, db, make_habit, owner_id):
        habit = make_habit(start_date=date(2031, 1, 1))
        summarize_habits(db, [habit], date(2031, 1, 1), day=date(2031, 3, 1))
        assert habit.health == 100
        assert habit.last_health_check_at == date(2031, 1, 1)

        for d in (date(2031, 1, 1) + timedelta(days=i) for i in range(31)):
            record_increment(db, owner_id, habit.id, d, d)

        [summary] = summarize_habits(db, [habit], date(2031, 2, 1), day=date(2031, 2, 1))
        assert summary.health == 100
        assert summary.health_state == HealthState.thriving

    def test_past_day_listing_writes_no_stale_check_date(self, db, make_habit):
        habit = make_habit(start_date=date(2031, 1, 1))
        summarize_habits(db, [habit], date(2031, 1, 5), day=date(2030, 6, 1))
        assert habit.last_health_check_at == date(2031, 1, 5)
        assert habit.health == 100 - 4 * 15

    def test_morning_listing_then_completion_every_day(self, db, make_habit, owner_id):
        habit = make_habit(start_date=date(2032, 1, 1))
        for d in (date(2032, 1, 1) + timedelta(days=i) for i in range(10)):
            summarize_habits(db, [habit], d)
            outcome = record_increment(db, owner_id, habit.id, d, d)
        assert outcome.streak == 10
        assert outcome.health == 100
        assert outcome.health_state == HealthState.thriving
