"""
Categories router.

POST /categories    create a category
GET  /categories    categories with their active habit summaries
"""
from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from habitflow.core.context import get_owner_id, get_today
from habitflow.db.base import get_db
from habitflow.routers.serializers import summary_to_response
from habitflow.schemas.category import CategoryCreate, CategoryResponse
from habitflow.services.categories import create_category, list_categories
from habitflow.services.habits import list_active_habits, summarize_habits

router = APIRouter(prefix="/categories", tags=["categories"])


@router.post(
    "",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a category",
)
def create(
    payload: CategoryCreate,
    owner_id: int = Depends(get_owner_id),
    db: Session = Depends(get_db),
):
    category = create_category(db, owner_id, payload.name, payload.color)
    return CategoryResponse(
        id=category.id,
        name=category.name,
        color=category.color,
        position=category.position,
    )


@router.get(
    "",
    response_model=list[CategoryResponse],
    summary="Categories with habit summaries",
)
def list_all(
    day: Optional[date] = Query(default=None, examples=["2024-01-04"]),
    owner_id: int = Depends(get_owner_id),
    today: date = Depends(get_today),
    db: Session = Depends(get_db),
):
    """Each category with its active habits, `is_due_today` and `current_streak` included."""
    target = day or today
    summaries = summarize_habits(db, list_active_habits(db, owner_id), today, target)
    by_category: dict[int, list] = {}
    for s in summaries:
        if s.habit.category_id is not None:
            by_category.setdefault(s.habit.category_id, []).append(summary_to_response(s))

    return [
        CategoryResponse(
            id=c.id,
            name=c.name,
            color=c.color,
            position=c.position,
            habits=by_category.get(c.id, []),
        )
        for c in list_categories(db, owner_id)
    ]
