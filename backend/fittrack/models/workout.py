"""Workout and exercise set models."""

from datetime import date
from typing import Optional

from sqlalchemy import Boolean, Date, Float, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fittrack.models.base import BaseModel
from fittrack.models.health import DEFAULT_SOURCE


class Workout(BaseModel):
    """One workout of a given type on a given day."""

    __tablename__ = "workouts"
    __table_args__ = (
        UniqueConstraint("user_id", "date", "workout_type", name="uq_workouts_user_date_type"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
    )
    date: Mapped[date] = mapped_column(Date, index=True)
    workout_type: Mapped[str] = mapped_column(String(30), index=True)
    completed: Mapped[bool] = mapped_column(Boolean, default=False)
    duration_minutes: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    calories: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    source: Mapped[str] = mapped_column(String(20), default=DEFAULT_SOURCE)

    exercise_sets: Mapped[list["ExerciseSet"]] = relationship(
        "ExerciseSet",
        back_populates="workout",
        cascade="all, delete-orphan",
        order_by="ExerciseSet.id",
    )

    def __repr__(self) -> str:
        return f"<Workout(id={self.id}, date={self.date}, type={self.workout_type})>"


class ExerciseSet(BaseModel):
    """Single set of an exercise within a workout."""

    __tablename__ = "exercise_sets"

    id: Mapped[int] = mapped_column(primary_key=True)
    workout_id: Mapped[int] = mapped_column(
        ForeignKey("workouts.id", ondelete="CASCADE"),
        index=True,
    )
    exercise_name: Mapped[str] = mapped_column(String(100))
    set_number: Mapped[int] = mapped_column(Integer)
    reps: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    weight: Mapped[Optional[float]] = mapped_column(Float, nullable=True)  # lbs

    workout: Mapped["Workout"] = relationship("Workout", back_populates="exercise_sets")

    def __repr__(self) -> str:
        return f"<ExerciseSet(workout_id={self.workout_id}, {self.exercise_name} #{self.set_number})>"
