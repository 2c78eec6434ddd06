"""Monthly milestone endpoints.

A year's milestones are seeded in one go from the yearly weight and lift
targets, then edited month by month.
"""

import logging
from datetime import datetime
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fittrack.api.v1.endpoints.auth import get_current_user
from fittrack.core.database import get_db
from fittrack.core.dates import local_today
from fittrack.core.errors import ConflictError, NotFoundError, StorageError
from fittrack.core.workout_constants import MONTHLY_WEIGHT_TARGETS, monthly_lift_targets
from fittrack.models.milestone import Milestone
from fittrack.models.user import User

router = APIRouter()
logger = logging.getLogger(__name__)


class MilestoneSeed(BaseModel):
    year: int | None = Field(None, ge=2000, le=2100)


class MilestoneUpdate(BaseModel):
    """Fields to change on one month's milestone."""

    month: int = Field(ge=1, le=12)
    year: int | None = Field(None, ge=2000, le=2100)
    target_weight: float | None = None
    target_lifts: dict[str, float] | None = None
    achieved_weight: bool | None = None
    achieved_lifts: dict[str, bool] | None = None


class MilestoneResponse(BaseModel):
    id: int
    year: int
    month: int
    target_weight: float | None
    target_lifts: dict[str, Any]
    achieved_weight: bool
    achieved_lifts: dict[str, Any]
    updated_at: datetime

    class Config:
        from_attributes = True


def _default_year(user: User) -> int:
    return local_today(user.timezone).year


@router.get("")
async def list_milestones(
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
    year: int | None = Query(None, ge=2000, le=2100),
) -> dict[str, list[MilestoneResponse]]:
    result = await db.execute(
        select(Milestone)
        .where(
            Milestone.user_id == current_user.id,
            Milestone.year == (year or _default_year(current_user)),
        )
        .order_by(Milestone.month)
    )
    return {"milestones": [MilestoneResponse.model_validate(m) for m in result.scalars().all()]}


@router.post("", status_code=status.HTTP_201_CREATED)
async def seed_milestones(
    current_user: Annotated[User, Depends(get_current_user)],
    request: MilestoneSeed | None = None,
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    """Create all twelve months for a year from the standard targets."""
    user_id = current_user.id
    year = (request.year if request else None) or _default_year(current_user)

    existing = await db.scalar(
        select(Milestone.id).where(Milestone.user_id == user_id, Milestone.year == year).limit(1)
    )
    if existing is not None:
        raise ConflictError("Milestones already exist for this year. Use PATCH to update.")

    milestones = [
        Milestone(
            user_id=user_id,
            year=year,
            month=month,
            target_weight=MONTHLY_WEIGHT_TARGETS[month],
            target_lifts=monthly_lift_targets(month),
            achieved_weight=False,
            achieved_lifts={},
        )
        for month in range(1, 13)
    ]
    db.add_all(milestones)
    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Failed to seed milestones for user {user_id}: {e}")
        raise StorageError("Failed to seed milestones") from e

    return {
        "milestones": [MilestoneResponse.model_validate(m) for m in milestones],
        "message": "Milestones seeded successfully",
    }


@router.patch("")
async def update_milestone(
    request: MilestoneUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
) -> dict[str, MilestoneResponse]:
    year = request.year or _default_year(current_user)
    milestone = await db.scalar(
        select(Milestone).where(
            Milestone.user_id == current_user.id,
            Milestone.year == year,
            Milestone.month == request.month,
        )
    )
    if milestone is None:
        raise NotFoundError(f"No milestone for {year}-{request.month:02d}")

    for name, value in request.model_dump(exclude={"month", "year"}, exclude_unset=True).items():
        setattr(milestone, name, value)
    await db.commit()
    await db.refresh(milestone)

    return {"milestone": MilestoneResponse.model_validate(milestone)}
