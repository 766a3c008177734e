"""
Category service. Categories only group habits for listings and heatmaps.
"""
from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from habitflow.models.category import Category


def create_category(db: Session, owner_id: int, name: str, color: str | None = None) -> Category:
    last_position = db.execute(
        select(func.max(Category.position)).where(Category.owner_id == owner_id)
    ).scalar_one_or_none()
    category = Category(
        owner_id=owner_id,
        name=name,
        color=color,
        position=(last_position or 0) + 1,
    )
    db.add(category)
    db.commit()
    db.refresh(category)
    return category


def list_categories(db: Session, owner_id: int) -> list[Category]:
    return list(
        db.execute(
            select(Category)
            .where(Category.owner_id == owner_id, Category.archived.is_(False))
            .order_by(Category.position, Category.name)
        ).scalars()
    )
