"""
HabitCompletion: one row per (habit_id, day) holding the day's count.

A row never holds count 0: the ledger deletes it instead. The unique
constraint is the conflict target of the increment upsert.
"""
from datetime import datetime, date
from sqlalchemy import Integer, DateTime, Date, ForeignKey, UniqueConstraint, CheckConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from habitflow.db.base import Base


class HabitCompletion(Base):
    __tablename__ = "habit_completions"
    __table_args__ = (
        UniqueConstraint("habit_id", "day", name="uq_habit_completion_habit_day"),
        CheckConstraint("count > 0", name="ck_habit_completion_count_positive"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    habit_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("habits.id", ondelete="CASCADE"), nullable=False, index=True
    )
    day: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    count: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    habit: Mapped["Habit"] = relationship(back_populates="completions")  # noqa: F821
