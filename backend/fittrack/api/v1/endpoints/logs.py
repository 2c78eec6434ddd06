"""Manual daily metric logs.

Paths:
  GET  /api/logs/{metric}  list own records, newest first
  POST /api/logs/{metric}  add or replace the record for a date
"""

from datetime import date
from enum import Enum
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Query
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fittrack.api.v1.endpoints.auth import get_current_user
from fittrack.core.database import get_db
from fittrack.core.errors import ValidationError
from fittrack.models import NutritionLog, SleepLog, StepsLog, WeightLog
from fittrack.models.schemas import field_errors, health_record_adapter
from fittrack.models.user import User
from fittrack.services.ingest import IngestionDispatcher

router = APIRouter()


class Metric(str, Enum):
    WEIGHT = "weight"
    STEPS = "steps"
    SLEEP = "sleep"
    NUTRITION = "nutrition"


MODELS = {
    Metric.WEIGHT: WeightLog,
    Metric.STEPS: StepsLog,
    Metric.SLEEP: SleepLog,
    Metric.NUTRITION: NutritionLog,
}


def _row_to_dict(row) -> dict[str, Any]:
    return {
        column.name: getattr(row, column.name)
        for column in row.__table__.columns
        if column.name != "user_id"
    }


@router.get("/{metric}")
async def list_logs(
    metric: Metric,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
    start_date: date | None = None,
    end_date: date | None = None,
    limit: int = Query(90, ge=1, le=366),
) -> dict[str, Any]:
    model = MODELS[metric]
    query = select(model).where(model.user_id == current_user.id)
    if start_date:
        query = query.where(model.date >= start_date)
    if end_date:
        query = query.where(model.date <= end_date)

    result = await db.execute(
        query.order_by(model.date.desc())
        .limit(limit)
        .execution_options(populate_existing=True)
    )
    return {
        "metric": metric.value,
        "items": [_row_to_dict(row) for row in result.scalars().all()],
    }


@router.post("/{metric}")
async def save_log(
    metric: Metric,
    current_user: Annotated[User, Depends(get_current_user)],
    body: dict[str, Any] = Body(...),
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    """Save a manual entry with the same ranges the importers use."""
    try:
        record = health_record_adapter.validate_python({**body, "type": metric.value})
    except PydanticValidationError as e:
        raise ValidationError(details=field_errors(e.errors())) from e

    dispatcher = IngestionDispatcher(
        db,
        current_user.id,
        current_user.timezone,
        source="manual",
        endpoint="manual_log",
    )
    on_date = await dispatcher.import_record(record)

    model = MODELS[metric]
    saved = await db.scalar(
        select(model)
        .where(model.user_id == current_user.id, model.date == on_date)
        .execution_options(populate_existing=True)
    )
    return {"success": True, "metric": metric.value, "log": _row_to_dict(saved)}
