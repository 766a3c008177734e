"""
Habit request / response schemas.

POST /habits               → HabitCreate → HabitResponse
GET  /habits               → list[HabitSummaryResponse]
GET  /habits/{id}/streak   → StreakResponse
GET  /habits/{id}/due      → DueResponse
"""
from datetime import date
from typing import Any, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class HabitCreate(BaseModel):
    name: str = Field(min_length=1, max_length=256)
    category_id: Optional[int] = None
    target_count: int = Field(default=1, ge=1, description="Completions needed per day.")
    frequency_type: Literal["day", "week", "month", "year"] = "day"
    schedule_mode: Literal["flexible", "specific_days", "interval"] = "flexible"
    schedule_config: dict[str, Any] = Field(
        default_factory=dict,
        description=(
            'specific_days: {"days_of_week": [1, 3, 5]} (0 = Sunday). '
            'interval: {"interval_days": 2, "interval_unit": "days", "anchor_date": "2024-01-01"}.'
        ),
        examples=[{"days_of_week": [1, 3, 5]}],
    )
    start_date: Optional[date] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("name must not be blank")
        return v.strip()


class HabitResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    category_id: Optional[int]
    target_count: int
    frequency_type: str
    schedule_mode: str
    schedule_config: dict[str, Any]
    start_date: Optional[str]
    health: float
    last_health_check_at: Optional[str]
    archived_at: Optional[str] = None


class HabitSummaryResponse(HabitResponse):
    """Listing payload: habit fields plus engine-derived values for `day`."""
    today_count: int
    is_due_today: bool
    current_streak: int
    health_state: str = Field(description='"thriving" | "steady" | "at_risk"')
    schedule_description: str = Field(examples=["MWF"])


class StreakResponse(BaseModel):
    habit_id: int
    as_of: str
    streak: int
    historical: bool = Field(
        description="True when the grace rule was not applied."
    )


class DueResponse(BaseModel):
    habit_id: int
    day: str
    is_due: bool
