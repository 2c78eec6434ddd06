"""Initial schema.

Revision ID: 001_initial
Revises:
Create Date: 2026-01-04

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    ]


def _owner() -> list:
    return [
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    ]


def upgrade() -> None:
    # -------------------------------------------------------------------------
    # Users & API keys
    # -------------------------------------------------------------------------
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.Text(), nullable=False),
        sa.Column("display_name", sa.String(length=100), nullable=True),
        sa.Column("timezone", sa.String(length=50), nullable=False, server_default="America/New_York"),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "api_keys",
        *_owner(),
        sa.Column("key_hash", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column("last_used_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_api_keys_user_id", "api_keys", ["user_id"])
    op.create_index("ix_api_keys_key_hash", "api_keys", ["key_hash"], unique=True)
    op.create_index("ix_api_keys_is_active", "api_keys", ["is_active"])

    # -------------------------------------------------------------------------
    # Daily metrics
    # -------------------------------------------------------------------------
    daily_metrics = {
        "weight_logs": [sa.Column("weight", sa.Float(), nullable=False)],
        "steps_logs": [sa.Column("steps", sa.Integer(), nullable=False)],
        "sleep_logs": [sa.Column("hours", sa.Float(), nullable=False)],
        "nutrition_logs": [
            sa.Column("calories", sa.Integer(), nullable=True),
            sa.Column("protein", sa.Float(), nullable=True),
            sa.Column("carbs", sa.Float(), nullable=True),
            sa.Column("fat", sa.Float(), nullable=True),
        ],
    }
    for table, value_columns in daily_metrics.items():
        op.create_table(
            table,
            *_owner(),
            sa.Column("date", sa.Date(), nullable=False),
            *value_columns,
            sa.Column("source", sa.String(length=20), nullable=False, server_default="manual"),
            *_timestamps(),
            sa.UniqueConstraint("user_id", "date", name=f"uq_{table}_user_date"),
        )
        op.create_index(f"ix_{table}_user_id", table, ["user_id"])
        op.create_index(f"ix_{table}_date", table, ["date"])

    # -------------------------------------------------------------------------
    # Workouts
    # -------------------------------------------------------------------------
    op.create_table(
        "workouts",
        *_owner(),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("workout_type", sa.String(length=30), nullable=False),
        sa.Column("completed", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("duration_minutes", sa.Integer(), nullable=True),
        sa.Column("calories", sa.Integer(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("source", sa.String(length=20), nullable=False, server_default="manual"),
        *_timestamps(),
        sa.UniqueConstraint("user_id", "date", "workout_type", name="uq_workouts_user_date_type"),
    )
    op.create_index("ix_workouts_user_id", "workouts", ["user_id"])
    op.create_index("ix_workouts_date", "workouts", ["date"])
    op.create_index("ix_workouts_workout_type", "workouts", ["workout_type"])

    op.create_table(
        "exercise_sets",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("workout_id", sa.Integer(), nullable=False),
        sa.Column("exercise_name", sa.String(length=100), nullable=False),
        sa.Column("set_number", sa.Integer(), nullable=False),
        sa.Column("reps", sa.Integer(), nullable=True),
        sa.Column("weight", sa.Float(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["workout_id"], ["workouts.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_exercise_sets_workout_id", "exercise_sets", ["workout_id"])

    # -------------------------------------------------------------------------
    # Habits, milestones, reviews
    # -------------------------------------------------------------------------
    op.create_table(
        "habit_logs",
        *_owner(),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("meditation", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("journal", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("creatine", sa.Boolean(), nullable=False, server_default="false"),
        *_timestamps(),
        sa.UniqueConstraint("user_id", "date", name="uq_habit_logs_user_date"),
    )
    op.create_index("ix_habit_logs_user_id", "habit_logs", ["user_id"])
    op.create_index("ix_habit_logs_date", "habit_logs", ["date"])

    op.create_table(
        "milestones",
        *_owner(),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("month", sa.Integer(), nullable=False),
        sa.Column("target_weight", sa.Float(), nullable=True),
        sa.Column("target_lifts", postgresql.JSONB(), nullable=False, server_default="{}"),
        sa.Column("achieved_weight", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("achieved_lifts", postgresql.JSONB(), nullable=False, server_default="{}"),
        *_timestamps(),
        sa.UniqueConstraint("user_id", "year", "month", name="uq_milestones_user_year_month"),
    )
    op.create_index("ix_milestones_user_id", "milestones", ["user_id"])
    op.create_index("ix_milestones_year", "milestones", ["year"])

    op.create_table(
        "weekly_reviews",
        *_owner(),
        sa.Column("week_start_date", sa.Date(), nullable=False),
        sa.Column("weight_avg", sa.Float(), nullable=True),
        sa.Column("workouts_completed", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("workouts_target", sa.Integer(), nullable=False, server_default="5"),
        sa.Column("habits_completed", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("habits_total", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("went_well", sa.Text(), nullable=True),
        sa.Column("needs_adjustment", sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("user_id", "week_start_date", name="uq_weekly_reviews_user_week"),
    )
    op.create_index("ix_weekly_reviews_user_id", "weekly_reviews", ["user_id"])
    op.create_index("ix_weekly_reviews_week_start_date", "weekly_reviews", ["week_start_date"])


def downgrade() -> None:
    for table in (
        "weekly_reviews",
        "milestones",
        "habit_logs",
        "exercise_sets",
        "workouts",
        "nutrition_logs",
        "sleep_logs",
        "steps_logs",
        "weight_logs",
        "api_keys",
        "users",
    ):
        op.drop_table(table)
