"""Daily health metric models.

Each table holds at most one row per user per date. Imports overwrite the
existing row instead of appending history.
"""

from datetime import date
from typing import Optional

from sqlalchemy import Date, Float, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from fittrack.models.base import BaseModel

# manual | apple_health | api | loseit
DEFAULT_SOURCE = "manual"


class WeightLog(BaseModel):
    """Daily body weight in lbs."""

    __tablename__ = "weight_logs"
    __table_args__ = (
        UniqueConstraint("user_id", "date", name="uq_weight_logs_user_date"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
    )
    date: Mapped[date] = mapped_column(Date, index=True)
    weight: Mapped[float] = mapped_column(Float)
    source: Mapped[str] = mapped_column(String(20), default=DEFAULT_SOURCE)

    def __repr__(self) -> str:
        return f"<WeightLog(user_id={self.user_id}, date={self.date}, weight={self.weight})>"


class StepsLog(BaseModel):
    """Daily step count."""

    __tablename__ = "steps_logs"
    __table_args__ = (
        UniqueConstraint("user_id", "date", name="uq_steps_logs_user_date"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
    )
    date: Mapped[date] = mapped_column(Date, index=True)
    steps: Mapped[int] = mapped_column(Integer)
    source: Mapped[str] = mapped_column(String(20), default=DEFAULT_SOURCE)


class SleepLog(BaseModel):
    """Hours slept, attributed to the date the user woke up."""

    __tablename__ = "sleep_logs"
    __table_args__ = (
        UniqueConstraint("user_id", "date", name="uq_sleep_logs_user_date"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
    )
    date: Mapped[date] = mapped_column(Date, index=True)
    hours: Mapped[float] = mapped_column(Float)
    source: Mapped[str] = mapped_column(String(20), default=DEFAULT_SOURCE)


class NutritionLog(BaseModel):
    """Daily nutrition totals. Macros are grams."""

    __tablename__ = "nutrition_logs"
    __table_args__ = (
        UniqueConstraint("user_id", "date", name="uq_nutrition_logs_user_date"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
    )
    date: Mapped[date] = mapped_column(Date, index=True)
    calories: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    protein: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    carbs: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    fat: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    source: Mapped[str] = mapped_column(String(20), default=DEFAULT_SOURCE)
