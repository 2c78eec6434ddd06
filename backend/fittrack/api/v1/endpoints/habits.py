"""Daily habit checklist endpoints."""

import logging
from datetime import date, datetime, timedelta
from typing import Annotated, Any, Iterable

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fittrack.api.v1.endpoints.auth import get_current_user
from fittrack.core.database import build_upsert, get_db
from fittrack.core.dates import local_today
from fittrack.core.errors import StorageError
from fittrack.models.habit import HabitLog
from fittrack.models.schemas import IsoDate
from fittrack.models.user import User

router = APIRouter()
logger = logging.getLogger(__name__)

STREAK_LOOKBACK_DAYS = 365
HABITS = ("meditation", "journal", "creatine")


class HabitUpdate(BaseModel):
    """Habits to set for a date. Omitted habits keep their current value."""

    date: IsoDate
    meditation: bool | None = None
    journal: bool | None = None
    creatine: bool | None = None


class HabitLogResponse(BaseModel):
    id: int
    date: date
    meditation: bool
    journal: bool
    creatine: bool
    updated_at: datetime

    class Config:
        from_attributes = True


def current_streak(active_days: Iterable[date], today: date) -> int:
    """Consecutive days, counting back from today, with meditation or journaling.

    Today not being logged yet does not break the streak.
    """
    active = set(active_days)
    streak = 0
    for offset in range(STREAK_LOOKBACK_DAYS):
        day = today - timedelta(days=offset)
        if day in active:
            streak += 1
        elif offset == 0:
            continue
        else:
            break
    return streak


@router.post("")
async def update_habits(
    request: HabitUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    user_id = current_user.id
    changes = request.model_dump(include=set(HABITS), exclude_none=True)
    stmt = build_upsert(
        db,
        HabitLog,
        {"user_id": user_id, "date": request.date, **changes},
        ("user_id", "date"),
    )

    try:
        await db.execute(stmt)
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Failed to update habits for user {user_id}: {e}")
        raise StorageError("Failed to update habits") from e

    habit_log = await db.scalar(
        select(HabitLog)
        .where(HabitLog.user_id == user_id, HabitLog.date == request.date)
        .execution_options(populate_existing=True)
    )
    return {"success": True, "habit_log": HabitLogResponse.model_validate(habit_log)}


@router.get("")
async def list_habits(
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
    days: int = Query(30, ge=1, le=365),
) -> dict[str, Any]:
    """Habit logs for the last ``days`` days plus the current streak."""
    today = local_today(current_user.timezone)

    result = await db.execute(
        select(HabitLog)
        .where(
            HabitLog.user_id == current_user.id,
            HabitLog.date >= today - timedelta(days=days),
        )
        .order_by(HabitLog.date.desc())
        .execution_options(populate_existing=True)
    )
    logs = result.scalars().all()

    active_days = await db.scalars(
        select(HabitLog.date).where(
            HabitLog.user_id == current_user.id,
            HabitLog.date > today - timedelta(days=STREAK_LOOKBACK_DAYS),
            or_(HabitLog.meditation.is_(True), HabitLog.journal.is_(True)),
        )
    )

    return {
        "habit_logs": [HabitLogResponse.model_validate(log) for log in logs],
        "streak": current_streak(active_days.all(), today),
    }
