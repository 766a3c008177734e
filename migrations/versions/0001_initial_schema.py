"""initial schema: categories, habits, habit_completions

Revision ID: 0001
Revises:
Create Date: 2024-01-01

habit_completions holds one row per (habit_id, day); the unique
constraint is the conflict target of the increment upsert and the check
constraint keeps zero-count rows out.
"""
from alembic import op
import sqlalchemy as sa

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "categories",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("owner_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(128), nullable=False),
        sa.Column("color", sa.String(16), nullable=True),
        sa.Column("archived", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_index("ix_categories_owner_id", "categories", ["owner_id"])

    op.create_table(
        "habits",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("owner_id", sa.Integer(), nullable=False),
        sa.Column(
            "category_id",
            sa.Integer(),
            sa.ForeignKey("categories.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("name", sa.String(256), nullable=False),
        sa.Column(
            "frequency_type",
            sa.Enum("day", "week", "month", "year", name="frequency_type_enum"),
            nullable=False,
            server_default="day",
        ),
        sa.Column("target_count", sa.Integer(), nullable=False, server_default="1"),
        sa.Column(
            "schedule_mode",
            sa.Enum("flexible", "specific_days", "interval", name="schedule_mode_enum"),
            nullable=False,
            server_default="flexible",
        ),
        sa.Column("schedule_config", sa.JSON(), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("health", sa.Integer(), nullable=False, server_default="100"),
        sa.Column("last_health_check_at", sa.Date(), nullable=True),
        sa.Column("current_streak", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("archived_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.CheckConstraint("target_count >= 1", name="ck_habits_target_count_positive"),
        sa.CheckConstraint("health >= 0 AND health <= 100", name="ck_habits_health_range"),
    )
    op.create_index("ix_habits_owner_id", "habits", ["owner_id"])
    op.create_index("ix_habits_category_id", "habits", ["category_id"])

    op.create_table(
        "habit_completions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "habit_id",
            sa.Integer(),
            sa.ForeignKey("habits.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("day", sa.Date(), nullable=False),
        sa.Column("count", sa.Integer(), nullable=False, server_default="1"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.UniqueConstraint("habit_id", "day", name="uq_habit_completion_habit_day"),
        sa.CheckConstraint("count > 0", name="ck_habit_completion_count_positive"),
    )
    op.create_index("ix_habit_completions_habit_id", "habit_completions", ["habit_id"])
    op.create_index("ix_habit_completions_day", "habit_completions", ["day"])


def downgrade() -> None:
    op.drop_index("ix_habit_completions_day", table_name="habit_completions")
    op.drop_index("ix_habit_completions_habit_id", table_name="habit_completions")
    op.drop_table("habit_completions")
    op.drop_index("ix_habits_category_id", table_name="habits")
    op.drop_index("ix_habits_owner_id", table_name="habits")
    op.drop_table("habits")
    op.drop_index("ix_categories_owner_id", table_name="categories")
    op.drop_table("categories")
    sa.Enum(name="schedule_mode_enum").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="frequency_type_enum").drop(op.get_bind(), checkfirst=True)
