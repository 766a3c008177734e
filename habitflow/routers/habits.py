"""
Habits router.

POST   /habits                create a habit (schedule validated here)
GET    /habits                active habits with engine-derived listing values
GET    /habits/{id}           one habit summary
DELETE /habits/{id}           archive
GET    /habits/{id}/streak    current (grace) or historical streak
GET    /habits/{id}/due       Schedule Evaluator for a single day
"""
from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from habitflow.core.context import get_owner_id, get_today
from habitflow.db.base import get_db
from habitflow.routers.serializers import habit_to_response, summary_to_response
from habitflow.schemas.common import ErrorResponse
from habitflow.schemas.habit import (
    DueResponse,
    HabitCreate,
    HabitResponse,
    HabitSummaryResponse,
    StreakResponse,
)
from habitflow.services.habits import (
    HabitData,
    archive_habit,
    create_habit,
    get_category,
    get_owned_habit,
    list_active_habits,
    summarize_habits,
)
from habitflow.services.schedule import is_due, schedule_for
from habitflow.services.streaks import current_streak, historical_streak

router = APIRouter(prefix="/habits", tags=["habits"])


# ---------------------------------------------------------------------------
# POST /habits
# ---------------------------------------------------------------------------

@router.post(
    "",
    response_model=HabitResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a habit",
    responses={
        404: {"model": ErrorResponse, "description": "category_id does not belong to the user."},
        422: {"description": "Invalid body or schedule_config for schedule_mode."},
    },
)
def create(
    payload: HabitCreate,
    owner_id: int = Depends(get_owner_id),
    db: Session = Depends(get_db),
):
    """
    Create a habit. `schedule_config` is validated against `schedule_mode`
    and rejected with **422 INVALID_SCHEDULE** when incomplete; it is never
    defaulted later at read time.
    """
    habit = create_habit(db, owner_id, HabitData(**payload.model_dump()))
    return habit_to_response(habit)


# ---------------------------------------------------------------------------
# GET /habits
# ---------------------------------------------------------------------------

@router.get(
    "",
    response_model=list[HabitSummaryResponse],
    summary="List active habits",
)
def list_habits(
    category_id: Optional[int] = Query(default=None, description="Only this category."),
    day: Optional[date] = Query(
        default=None,
        description="Evaluate due-ness, counts and streaks for this day. Defaults to the user's today.",
        examples=["2024-01-04"],
    ),
    owner_id: int = Depends(get_owner_id),
    today: date = Depends(get_today),
    db: Session = Depends(get_db),
):
    """
    Active (non-archived) habits with `is_due_today`, `today_count`,
    `current_streak` (grace rule applied) and `health`.

    Health is settled against the user's real today, never against `day`.
    """
    if category_id is not None:
        get_category(db, owner_id, category_id)
    habits = list_active_habits(db, owner_id, category_id)
    return [summary_to_response(s) for s in summarize_habits(db, habits, today, day)]


# ---------------------------------------------------------------------------
# GET /habits/{id}
# ---------------------------------------------------------------------------

@router.get(
    "/{habit_id}",
    response_model=HabitSummaryResponse,
    summary="Get one habit",
    responses={404: {"model": ErrorResponse, "description": "Habit not found or archived."}},
)
def get_habit(
    habit_id: int,
    day: Optional[date] = Query(default=None, examples=["2024-01-04"]),
    owner_id: int = Depends(get_owner_id),
    today: date = Depends(get_today),
    db: Session = Depends(get_db),
):
    habit = get_owned_habit(db, owner_id, habit_id)
    summary = summarize_habits(db, [habit], today, day)[0]
    return summary_to_response(summary)


# ---------------------------------------------------------------------------
# DELETE /habits/{id}
# ---------------------------------------------------------------------------

@router.delete(
    "/{habit_id}",
    response_model=HabitResponse,
    summary="Archive a habit",
    responses={404: {"model": ErrorResponse, "description": "Habit not found or already archived."}},
)
def archive(
    habit_id: int,
    owner_id: int = Depends(get_owner_id),
    db: Session = Depends(get_db),
):
    """Archived habits drop out of listings, streaks, health and heatmaps."""
    return habit_to_response(archive_habit(db, owner_id, habit_id))


# ---------------------------------------------------------------------------
# GET /habits/{id}/streak
# ---------------------------------------------------------------------------

@router.get(
    "/{habit_id}/streak",
    response_model=StreakResponse,
    summary="Streak as of a date",
    responses={404: {"model": ErrorResponse, "description": "Habit not found or archived."}},
)
def streak(
    habit_id: int,
    as_of: Optional[date] = Query(default=None, examples=["2024-01-04"]),
    historical: bool = Query(
        default=False,
        description="Skip the one-day grace rule (streak exactly as of `as_of`).",
    ),
    owner_id: int = Depends(get_owner_id),
    today: date = Depends(get_today),
    db: Session = Depends(get_db),
):
    """
    Consecutive due days meeting `target_count`, walking back from `as_of`.

    By default the grace rule applies: if `as_of` itself is unmet the
    streak ending the day before is returned.
    """
    habit = get_owned_habit(db, owner_id, habit_id)
    ref = as_of or today
    value = historical_streak(db, habit, ref) if historical else current_streak(db, habit, ref)
    return StreakResponse(habit_id=habit.id, as_of=str(ref), streak=value, historical=historical)


# ---------------------------------------------------------------------------
# GET /habits/{id}/due
# ---------------------------------------------------------------------------

@router.get(
    "/{habit_id}/due",
    response_model=DueResponse,
    summary="Is the habit due on a day?",
    responses={404: {"model": ErrorResponse, "description": "Habit not found or archived."}},
)
def due(
    habit_id: int,
    day: Optional[date] = Query(default=None, examples=["2024-01-02"]),
    owner_id: int = Depends(get_owner_id),
    today: date = Depends(get_today),
    db: Session = Depends(get_db),
):
    habit = get_owned_habit(db, owner_id, habit_id)
    target = day or today
    return DueResponse(habit_id=habit.id, day=str(target), is_due=is_due(schedule_for(habit), target))
