"""API key management for the logged-in user.

The plaintext key appears only in the response to POST /api-keys.
"""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from fittrack.api.v1.endpoints.auth import get_current_user
from fittrack.core.database import get_db
from fittrack.models.user import User
from fittrack.services.api_keys import ApiKeyService

router = APIRouter()


class ApiKeyCreate(BaseModel):
    """Request to issue a key."""

    name: str | None = Field(None, max_length=100)


class ApiKeyCreated(BaseModel):
    """Issued key, including the plaintext secret."""

    success: bool
    api_key: str
    id: int
    name: str
    message: str


class ApiKeyResponse(BaseModel):
    """Key metadata. Never includes the secret or its hash."""

    id: int
    name: str
    created_at: datetime
    last_used_at: datetime | None
    is_active: bool

    class Config:
        from_attributes = True


@router.post("", response_model=ApiKeyCreated, status_code=status.HTTP_201_CREATED)
async def create_api_key(
    current_user: Annotated[User, Depends(get_current_user)],
    request: ApiKeyCreate | None = None,
    db: AsyncSession = Depends(get_db),
) -> ApiKeyCreated:
    """Issue a new API key for health data import."""
    api_key, plaintext = await ApiKeyService(db).issue_key(
        current_user.id,
        request.name if request else None,
    )
    return ApiKeyCreated(
        success=True,
        api_key=plaintext,
        id=api_key.id,
        name=api_key.name,
        message="API key generated. Save it now; it will not be shown again.",
    )


@router.get("", response_model=list[ApiKeyResponse])
async def list_api_keys(
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
) -> list[ApiKeyResponse]:
    keys = await ApiKeyService(db).list_keys(current_user.id)
    return [ApiKeyResponse.model_validate(k) for k in keys]


@router.delete("/{key_id}", response_model=ApiKeyResponse)
async def revoke_api_key(
    key_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
) -> ApiKeyResponse:
    """Deactivate a key. The record is kept for auditing."""
    api_key = await ApiKeyService(db).revoke_key(current_user.id, key_id)
    return ApiKeyResponse.model_validate(api_key)
