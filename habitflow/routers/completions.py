"""
Completion ledger router.

POST /habits/{id}/completions/increment
POST /habits/{id}/completions/decrement

Both recompute the habit's streak and health in the same request.
"""
from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from habitflow.core.context import get_owner_id, get_today
from habitflow.db.base import get_db
from habitflow.schemas.common import ErrorResponse
from habitflow.schemas.completion import CompletionResponse
from habitflow.services.habits import CompletionOutcome, record_decrement, record_increment

router = APIRouter(prefix="/habits", tags=["completions"])


def _outcome_to_response(day: date, outcome: CompletionOutcome) -> CompletionResponse:
    return CompletionResponse(
        day=str(day),
        count=outcome.count,
        streak=outcome.streak,
        health=outcome.health,
        health_state=outcome.health_state.value,
    )


@router.post(
    "/{habit_id}/completions/increment",
    response_model=CompletionResponse,
    summary="Record one completion",
    responses={404: {"model": ErrorResponse, "description": "Habit not found or archived."}},
)
def increment(
    habit_id: int,
    day: Optional[date] = Query(
        default=None,
        description="Day to record. Defaults to the user's today.",
        examples=["2024-01-04"],
    ),
    owner_id: int = Depends(get_owner_id),
    today: date = Depends(get_today),
    db: Session = Depends(get_db),
):
    """Create the day's record at 1 or add 1 to it. Concurrent taps are never lost."""
    target = day or today
    return _outcome_to_response(target, record_increment(db, owner_id, habit_id, target, today))


@router.post(
    "/{habit_id}/completions/decrement",
    response_model=CompletionResponse,
    summary="Remove one completion",
    responses={404: {"model": ErrorResponse, "description": "Habit not found or archived."}},
)
def decrement(
    habit_id: int,
    day: Optional[date] = Query(
        default=None,
        description="Day to change. Defaults to the user's today.",
        examples=["2024-01-04"],
    ),
    owner_id: int = Depends(get_owner_id),
    today: date = Depends(get_today),
    db: Session = Depends(get_db),
):
    """
    Subtract 1 from the day's record. A record at 1 is deleted; a missing
    record is not an error and yields `count: 0`.
    """
    target = day or today
    return _outcome_to_response(target, record_decrement(db, owner_id, habit_id, target, today))
