"""Workout logging endpoints.

Paths:
  GET  /api/workouts        history, newest first
  POST /api/workouts        add or replace a workout for (date, type)
  GET  /api/workouts/today  what the weekly schedule has planned for today
"""

import logging
from datetime import date, datetime
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from fittrack.api.v1.endpoints.auth import get_current_user
from fittrack.core.database import build_upsert, get_db
from fittrack.core.dates import local_today
from fittrack.core.errors import StorageError
from fittrack.core.workout_constants import (
    REST_DAY,
    WORKOUT_TYPE_LABELS,
    WorkoutType,
    exercises_for_workout,
    monthly_lift_targets,
    scheduled_workout,
)
from fittrack.models.schemas import WORKOUT_CALORIES_RANGE, WORKOUT_DURATION_RANGE, IsoDate
from fittrack.models.user import User
from fittrack.models.workout import ExerciseSet, Workout

router = APIRouter()
logger = logging.getLogger(__name__)


# -------------------------------------------------------------------------
# Request/Response Models
# -------------------------------------------------------------------------


class ExerciseSetCreate(BaseModel):
    """One set of an exercise."""

    exercise_name: str = Field(min_length=1, max_length=100)
    set_number: int = Field(ge=1, le=10)
    reps: int | None = Field(None, ge=0, le=100)
    weight: float | None = Field(None, ge=0, le=1000)  # lbs


class WorkoutCreate(BaseModel):
    """Request to log a workout."""

    date: IsoDate
    workout_type: WorkoutType
    completed: bool = True
    duration_minutes: int | None = Field(
        None, ge=WORKOUT_DURATION_RANGE[0], le=WORKOUT_DURATION_RANGE[1], strict=True
    )
    calories: int | None = Field(
        None, ge=WORKOUT_CALORIES_RANGE[0], le=WORKOUT_CALORIES_RANGE[1], strict=True
    )
    notes: str | None = None
    exercises: list[ExerciseSetCreate] = []


class ExerciseSetResponse(BaseModel):
    id: int
    exercise_name: str
    set_number: int
    reps: int | None
    weight: float | None

    class Config:
        from_attributes = True


class WorkoutResponse(BaseModel):
    """Workout with its sets."""

    id: int
    date: date
    workout_type: str
    completed: bool
    duration_minutes: int | None
    calories: int | None
    notes: str | None
    source: str
    exercise_sets: list[ExerciseSetResponse]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


# -------------------------------------------------------------------------
# Endpoints
# -------------------------------------------------------------------------


@router.get("")
async def list_workouts(
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
    limit: int = Query(10, ge=1, le=100),
    offset: int = Query(0, ge=0),
    workout_type: WorkoutType | None = Query(None, alias="type"),
) -> dict[str, list[WorkoutResponse]]:
    query = (
        select(Workout)
        .where(Workout.user_id == current_user.id)
        .options(selectinload(Workout.exercise_sets))
        .execution_options(populate_existing=True)
    )
    if workout_type:
        query = query.where(Workout.workout_type == workout_type.value)

    query = query.order_by(Workout.date.desc(), Workout.id.desc()).offset(offset).limit(limit)
    result = await db.execute(query)
    return {"workouts": [WorkoutResponse.model_validate(w) for w in result.scalars().all()]}


@router.post("")
async def save_workout(
    request: WorkoutCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    """Log a workout. Sets, when given, replace the workout's existing sets."""
    user_id = current_user.id
    stmt = build_upsert(
        db,
        Workout,
        {
            "user_id": user_id,
            "date": request.date,
            "workout_type": request.workout_type.value,
            "completed": request.completed,
            "duration_minutes": request.duration_minutes,
            "calories": request.calories,
            "notes": request.notes,
            "source": "manual",
        },
        ("user_id", "date", "workout_type"),
    )

    try:
        await db.execute(stmt)
        workout_id = await db.scalar(
            select(Workout.id).where(
                Workout.user_id == user_id,
                Workout.date == request.date,
                Workout.workout_type == request.workout_type.value,
            )
        )
        if request.exercises:
            await db.execute(delete(ExerciseSet).where(ExerciseSet.workout_id == workout_id))
            db.add_all(
                ExerciseSet(workout_id=workout_id, **exercise.model_dump())
                for exercise in request.exercises
            )
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Failed to save workout for user {user_id}: {e}")
        raise StorageError("Failed to save workout") from e

    workout = await db.scalar(
        select(Workout)
        .where(Workout.id == workout_id)
        .options(selectinload(Workout.exercise_sets))
        .execution_options(populate_existing=True)
    )
    return {
        "success": True,
        "workout": WorkoutResponse.model_validate(workout),
        "exercise_count": len(request.exercises),
    }


@router.get("/today")
async def get_today(
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    """Scheduled workout for today with this month's target weights."""
    today = local_today(current_user.timezone)
    scheduled = scheduled_workout(today)

    if scheduled == REST_DAY:
        return {
            "date": today.isoformat(),
            "workout_type": REST_DAY,
            "label": "Rest & Weekly Review",
            "exercises": [],
            "completed": False,
        }

    targets = monthly_lift_targets(today.month)
    completed = await db.scalar(
        select(Workout.completed).where(
            Workout.user_id == current_user.id,
            Workout.date == today,
            Workout.workout_type == scheduled.value,
        )
    )
    return {
        "date": today.isoformat(),
        "workout_type": scheduled.value,
        "label": WORKOUT_TYPE_LABELS[scheduled],
        "exercises": [
            {
                "id": exercise.id,
                "name": exercise.name,
                "category": exercise.category,
                "sets": exercise.default_sets,
                "reps": exercise.default_reps,
                "target_weight": targets.get(exercise.id),
            }
            for exercise in exercises_for_workout(scheduled)
        ],
        "completed": bool(completed),
    }
