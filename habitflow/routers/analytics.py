"""
Analytics router: heatmaps and dashboard quick stats.

GET /analytics/heatmap               overall {date: percentage}
GET /analytics/heatmap/categories    {category_id: {date: percentage}}
GET /analytics/overview              heatmaps + quick stats
"""
from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from habitflow.core.config import settings
from habitflow.core.context import get_owner_id, get_today
from habitflow.db.base import get_db
from habitflow.schemas.analytics import OverviewResponse
from habitflow.services.analytics import AnalyticsOverview, build_heatmaps, build_overview
from habitflow.services.heatmap import serialize_series

router = APIRouter(prefix="/analytics", tags=["analytics"])

_END_QUERY = Query(
    default=None,
    description="Last day (inclusive) of the window. Defaults to the user's today.",
    examples=["2024-03-31"],
)
_DAYS_QUERY = Query(
    default=None,
    ge=0,
    le=366,
    description=f"Days before `end` to include. Defaults to {settings.HEATMAP_WINDOW_DAYS}.",
)


def _overview_to_response(o: AnalyticsOverview) -> OverviewResponse:
    return OverviewResponse(
        start=str(o.start),
        end=str(o.end),
        heatmap=serialize_series(o.heatmap),
        category_heatmap={
            str(category_id): serialize_series(series)
            for category_id, series in o.category_heatmap.items()
        },
        total_habits=o.total_habits,
        completed_today=o.completed_today,
        today_percentage=o.today_percentage,
        perfect_day_streak=o.perfect_day_streak,
        weekly_completions=o.weekly_completions,
        overall_health=o.overall_health,
        habits_at_risk=o.habits_at_risk,
    )


@router.get(
    "/heatmap",
    response_model=dict[str, int],
    summary="Completion heatmap across all active habits",
)
def heatmap(
    end: Optional[date] = _END_QUERY,
    days: Optional[int] = _DAYS_QUERY,
    owner_id: int = Depends(get_owner_id),
    today: date = Depends(get_today),
    db: Session = Depends(get_db),
):
    """
    For each day in the window: percentage (0-100, floored) of active habits
    whose count met `target_count`. 0 for every day when there are no habits.
    """
    overall, _ = build_heatmaps(db, owner_id, end or today, days)
    return serialize_series(overall)


@router.get(
    "/heatmap/categories",
    response_model=dict[str, dict[str, int]],
    summary="Completion heatmap per category",
)
def category_heatmap(
    end: Optional[date] = _END_QUERY,
    days: Optional[int] = _DAYS_QUERY,
    owner_id: int = Depends(get_owner_id),
    today: date = Depends(get_today),
    db: Session = Depends(get_db),
):
    """Same series restricted to each category. Categories without habits are omitted."""
    _, per_category = build_heatmaps(db, owner_id, end or today, days)
    return {
        str(category_id): serialize_series(series)
        for category_id, series in per_category.items()
    }


@router.get(
    "/overview",
    response_model=OverviewResponse,
    summary="Heatmaps plus quick stats",
)
def overview(
    end: Optional[date] = _END_QUERY,
    days: Optional[int] = _DAYS_QUERY,
    owner_id: int = Depends(get_owner_id),
    today: date = Depends(get_today),
    db: Session = Depends(get_db),
):
    """
    Refreshes health for habits not yet checked today (the user's real date,
    not `end`), then returns the heatmaps with `perfect_day_streak`,
    `weekly_completions`, `overall_health` and `habits_at_risk` (health < 50).
    """
    return _overview_to_response(build_overview(db, owner_id, end or today, today, days))
