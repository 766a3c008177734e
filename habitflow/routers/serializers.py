"""
ORM / service dataclass → response schema helpers shared by the routers.
"""
from __future__ import annotations

from habitflow.models.habit import Habit
from habitflow.schemas.habit import HabitResponse, HabitSummaryResponse
from habitflow.services.habits import HabitSummary


def _ev(v) -> str:
    """Extract bare string value from a str-enum or plain str."""
    return v.value if hasattr(v, "value") else str(v)


def _habit_fields(habit: Habit) -> dict:
    return dict(
        id=habit.id,
        name=habit.name,
        category_id=habit.category_id,
        target_count=habit.target_count,
        frequency_type=_ev(habit.frequency_type),
        schedule_mode=_ev(habit.schedule_mode),
        schedule_config=habit.schedule_config or {},
        start_date=str(habit.start_date) if habit.start_date else None,
        health=habit.health,
        last_health_check_at=(
            str(habit.last_health_check_at) if habit.last_health_check_at else None
        ),
        archived_at=habit.archived_at.isoformat() if habit.archived_at else None,
    )


def habit_to_response(habit: Habit) -> HabitResponse:
    return HabitResponse(**_habit_fields(habit))


def summary_to_response(summary: HabitSummary) -> HabitSummaryResponse:
    return HabitSummaryResponse(
        **_habit_fields(summary.habit),
        today_count=summary.today_count,
        is_due_today=summary.is_due_today,
        current_streak=summary.current_streak,
        health_state=_ev(summary.health_state),
        schedule_description=summary.schedule_description,
    )
