"""iOS Shortcuts sync endpoint.

A single flat payload carrying any mix of metrics, built for the Shortcuts
app where nested JSON is awkward to assemble.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from fittrack.api.v1.deps import get_ingest_user
from fittrack.core.database import get_db
from fittrack.models.schemas import ShortcutsSyncRequest
from fittrack.models.user import User
from fittrack.services.ingest import IngestionDispatcher

router = APIRouter()

USAGE = {
    "endpoint": "/api/shortcuts/sync",
    "method": "POST",
    "auth": "Authorization: Bearer <your-api-key>",
    "example": {
        "weight": 215.5,
        "steps": 8500,
        "sleep": 7.5,
        "calories": 1800,
        "protein": 150,
        "workout_type": "Running",
        "workout_duration": 30,
        "date": "2026-01-06",
    },
    "note": "All fields optional except at least one metric. Date defaults to today.",
}


@router.post("/sync")
async def sync(
    user: Annotated[User, Depends(get_ingest_user)],
    request: ShortcutsSyncRequest,
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    dispatcher = IngestionDispatcher(db, user.id, user.timezone, endpoint="shortcuts_sync")
    result = await dispatcher.sync(request)
    return result.to_dict()


@router.get("/sync")
async def usage() -> dict[str, Any]:
    """Describe the sync payload for people setting up a Shortcut."""
    return USAGE
