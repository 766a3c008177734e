"""
Analytics schemas.

GET /analytics/heatmap              → dict[str, int]
GET /analytics/heatmap/categories   → dict[str, dict[str, int]]
GET /analytics/overview             → OverviewResponse
"""
from pydantic import BaseModel, Field


class OverviewResponse(BaseModel):
    start: str = Field(description="First day (inclusive) of the heatmap window.")
    end: str = Field(description="Last day (inclusive) of the heatmap window.")
    heatmap: dict[str, int] = Field(
        description="ISO date → percentage (0-100) of habits that met their target."
    )
    category_heatmap: dict[str, dict[str, int]] = Field(
        description="Category id → same series restricted to that category."
    )
    total_habits: int
    completed_today: int
    today_percentage: int
    perfect_day_streak: int = Field(
        description="Consecutive days ending at `end` on which every habit met its target."
    )
    weekly_completions: int = Field(description="Completions since Monday of the end date's week.")
    overall_health: int = Field(description="Mean habit health, rounded.")
    habits_at_risk: int = Field(description="Habits with health below 50.")
