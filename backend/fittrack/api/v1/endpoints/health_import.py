"""Health data import endpoints (Health Auto Export and similar apps).

Paths:
  POST /api/health-import        one typed record
  POST /api/health-import/batch  up to 100 typed records
"""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from fittrack.api.v1.deps import get_ingest_user
from fittrack.core.database import get_db
from fittrack.core.errors import ValidationError
from fittrack.models.schemas import BatchImportRequest, field_errors, health_record_adapter
from fittrack.models.user import User
from fittrack.services.ingest import METRIC_TABLES, IngestionDispatcher

router = APIRouter()


@router.post("")
async def import_record(
    user: Annotated[User, Depends(get_ingest_user)],
    body: dict[str, Any] = Body(...),
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    """Import a single weight, steps, sleep or nutrition record."""
    try:
        record = health_record_adapter.validate_python(body)
    except PydanticValidationError as e:
        raise ValidationError(details=field_errors(e.errors())) from e

    dispatcher = IngestionDispatcher(db, user.id, user.timezone, endpoint="health_import")
    on_date = await dispatcher.import_record(record)

    return {
        "success": True,
        "message": f"{record.type} data saved successfully",
        "table": METRIC_TABLES[record.type],
        "date": on_date.isoformat(),
    }


@router.post("/batch")
async def import_batch(
    user: Annotated[User, Depends(get_ingest_user)],
    request: BatchImportRequest,
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    """Import many records; each one succeeds or fails on its own."""
    dispatcher = IngestionDispatcher(db, user.id, user.timezone, endpoint="health_import_batch")
    result = await dispatcher.import_batch(request.records)
    return result.to_dict()
