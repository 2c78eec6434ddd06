"""Weekly review model."""

from datetime import date
from typing import Optional

from sqlalchemy import Date, Float, ForeignKey, Integer, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from fittrack.models.base import BaseModel


class WeeklyReview(BaseModel):
    """End-of-week reflection, keyed by the Sunday that starts the week."""

    __tablename__ = "weekly_reviews"
    __table_args__ = (
        UniqueConstraint("user_id", "week_start_date", name="uq_weekly_reviews_user_week"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
    )
    week_start_date: Mapped[date] = mapped_column(Date, index=True)

    weight_avg: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    workouts_completed: Mapped[int] = mapped_column(Integer, default=0)
    workouts_target: Mapped[int] = mapped_column(Integer, default=5)
    habits_completed: Mapped[int] = mapped_column(Integer, default=0)
    habits_total: Mapped[int] = mapped_column(Integer, default=0)
    went_well: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    needs_adjustment: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
