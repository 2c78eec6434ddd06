"""Weekly review endpoints."""

import logging
from datetime import date, datetime
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fittrack.api.v1.endpoints.auth import get_current_user
from fittrack.core.database import build_upsert, get_db
from fittrack.core.dates import local_today, week_start
from fittrack.core.errors import StorageError
from fittrack.models.review import WeeklyReview
from fittrack.models.schemas import IsoDate
from fittrack.models.user import User

router = APIRouter()
logger = logging.getLogger(__name__)


class ReviewUpsert(BaseModel):
    """Weekly review. ``week_start_date`` defaults to this week's Sunday."""

    week_start_date: IsoDate | None = None
    weight_avg: float | None = Field(None, ge=50, le=500)
    workouts_completed: int = Field(0, ge=0, le=14)
    workouts_target: int = Field(5, ge=0, le=14)
    habits_completed: int = Field(0, ge=0)
    habits_total: int = Field(0, ge=0)
    went_well: str | None = None
    needs_adjustment: str | None = None


class ReviewResponse(BaseModel):
    id: int
    week_start_date: date
    weight_avg: float | None
    workouts_completed: int
    workouts_target: int
    habits_completed: int
    habits_total: int
    went_well: str | None
    needs_adjustment: str | None
    updated_at: datetime

    class Config:
        from_attributes = True


@router.get("")
async def list_reviews(
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
    week_start_date: date | None = None,
    limit: int = Query(10, ge=1, le=100),
) -> dict[str, list[ReviewResponse]]:
    query = (
        select(WeeklyReview)
        .where(WeeklyReview.user_id == current_user.id)
        .order_by(WeeklyReview.week_start_date.desc())
        .execution_options(populate_existing=True)
    )
    if week_start_date:
        query = query.where(WeeklyReview.week_start_date == week_start_date)
    else:
        query = query.limit(limit)

    result = await db.execute(query)
    return {"reviews": [ReviewResponse.model_validate(r) for r in result.scalars().all()]}


@router.post("")
async def save_review(
    request: ReviewUpsert,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    user_id = current_user.id
    # Reviews are keyed by the Sunday that starts the week
    week = week_start(request.week_start_date or local_today(current_user.timezone))

    values = request.model_dump(exclude={"week_start_date"})
    stmt = build_upsert(
        db,
        WeeklyReview,
        {"user_id": user_id, "week_start_date": week, **values},
        ("user_id", "week_start_date"),
    )
    try:
        await db.execute(stmt)
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Failed to save weekly review for user {user_id}: {e}")
        raise StorageError("Failed to save weekly review") from e

    review = await db.scalar(
        select(WeeklyReview)
        .where(WeeklyReview.user_id == user_id, WeeklyReview.week_start_date == week)
        .execution_options(populate_existing=True)
    )
    return {"review": ReviewResponse.model_validate(review)}
