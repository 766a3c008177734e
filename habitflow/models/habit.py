"""
Habit: the unit the recurrence & vitality engine works on.

schedule_config is stored as JSON and is only ever written after
`parse_schedule` accepted it, so readers can trust its shape:

  flexible       {}
  specific_days  {"days_of_week": [1, 3, 5]}          0 = Sunday
  interval       {"interval_days": 2, "interval_unit": "days",
                  "anchor_date": "2024-01-01"}
"""
from datetime import datetime, date
from typing import Optional
from sqlalchemy import Integer, String, DateTime, Date, Enum, JSON, ForeignKey, func
from sqlalchemy.orm import Mapped, mapped_column, relationship
import enum

from habitflow.db.base import Base


class ScheduleMode(str, enum.Enum):
    flexible = "flexible"
    specific_days = "specific_days"
    interval = "interval"


class FrequencyType(str, enum.Enum):
    day = "day"
    week = "week"
    month = "month"
    year = "year"


class Habit(Base):
    __tablename__ = "habits"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    owner_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    category_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True, index=True
    )
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    frequency_type: Mapped[str] = mapped_column(
        Enum(FrequencyType, name="frequency_type_enum"),
        nullable=False,
        default=FrequencyType.day,
    )
    target_count: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    schedule_mode: Mapped[str] = mapped_column(
        Enum(ScheduleMode, name="schedule_mode_enum"),
        nullable=False,
        default=ScheduleMode.flexible,
    )
    schedule_config: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    health: Mapped[int] = mapped_column(Integer, nullable=False, default=100)
    last_health_check_at: Mapped[date | None] = mapped_column(Date, nullable=True)
    current_streak: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    archived_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    category: Mapped[Optional["Category"]] = relationship(back_populates="habits")  # noqa: F821
    completions: Mapped[list["HabitCompletion"]] = relationship(  # noqa: F821
        back_populates="habit",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
