"""
Analytics overview: heatmaps plus the dashboard quick stats, computed
from one batched ledger read over the trailing window.

Quick stats
-----------
  total_habits         active habits of the owner
  completed_today      habits whose count on `end` meets target_count
  today_percentage     floor(completed_today * 100 / total_habits)
  perfect_day_streak   consecutive days ending at `end` with every habit met
  weekly_completions   sum of counts from Monday of `end`'s week through `end`
  overall_health       rounded mean health, 0 without habits
  habits_at_risk       habits with health < 50
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from habitflow.core.config import settings
from habitflow.core.errors import InvalidDateRangeError
from habitflow.services.habits import list_active_habits
from habitflow.services.heatmap import (
    build_category_heatmap,
    build_heatmap,
    completed_on,
    completion_percentage,
    heatmap_window,
)
from habitflow.services.ledger import counts_for_range, total_completions
from habitflow.services.streaks import perfect_day_streak
from habitflow.services.vitality import AT_RISK_THRESHOLD, refresh_health


@dataclass
class AnalyticsOverview:
    start: date
    end: date
    heatmap: dict[date, int]
    category_heatmap: dict[int, dict[date, int]]
    total_habits: int
    completed_today: int
    today_percentage: int
    perfect_day_streak: int
    weekly_completions: int
    overall_health: int
    habits_at_risk: int


def _resolve_window(end: date, days: Optional[int]) -> tuple[date, date]:
    window = settings.HEATMAP_WINDOW_DAYS if days is None else days
    if window < 0:
        raise InvalidDateRangeError(end - timedelta(days=window), end)
    return heatmap_window(end, window)


def build_heatmaps(
    db: Session,
    owner_id: int,
    end: date,
    days: Optional[int] = None,
) -> tuple[dict[date, int], dict[int, dict[date, int]]]:
    """Overall and per-category series for the trailing window ending at `end`."""
    start, end = _resolve_window(end, days)
    habits = list_active_habits(db, owner_id)
    counts = counts_for_range(db, [h.id for h in habits], start, end)
    return (
        build_heatmap(habits, start, end, counts),
        build_category_heatmap(habits, start, end, counts),
    )


def build_overview(
    db: Session,
    owner_id: int,
    end: date,
    today: date,
    days: Optional[int] = None,
) -> AnalyticsOverview:
    """Quick stats for the window ending at `end`. Health is settled against `today`."""
    start, end = _resolve_window(end, days)
    habits = list_active_habits(db, owner_id)

    refresh_health(db, habits, today)
    db.commit()

    counts = counts_for_range(db, [h.id for h in habits], start, end)
    week_start = end - timedelta(days=end.weekday())

    total = len(habits)
    completed_today = completed_on(habits, end, counts)
    weekly = total_completions(db, [h.id for h in habits], week_start, end)
    overall_health = round(sum(min(h.health, 100) for h in habits) / total) if total else 0

    return AnalyticsOverview(
        start=start,
        end=end,
        heatmap=build_heatmap(habits, start, end, counts),
        category_heatmap=build_category_heatmap(habits, start, end, counts),
        total_habits=total,
        completed_today=completed_today,
        today_percentage=completion_percentage(completed_today, total),
        perfect_day_streak=perfect_day_streak(habits, end, counts),
        weekly_completions=weekly,
        overall_health=overall_health,
        habits_at_risk=sum(1 for h in habits if h.health < AT_RISK_THRESHOLD),
    )
