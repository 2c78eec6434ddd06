"""Local account authentication.

Paths:
  /api/auth/login, /logout, /me
"""

import logging
from datetime import datetime, timezone as tz
from typing import Annotated, Any

from fastapi import APIRouter, Cookie, Depends, Response
from pydantic import BaseModel, EmailStr
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fittrack.core.database import get_db
from fittrack.core.errors import AuthenticationError
from fittrack.core.security import verify_password
from fittrack.core.session import (
    SESSION_COOKIE_NAME,
    clear_session_cookie,
    create_session,
    delete_session,
    get_session,
    set_session_cookie,
)
from fittrack.models.user import User

router = APIRouter()
logger = logging.getLogger(__name__)


# -------------------------------------------------------------------------
# Request/Response Models
# -------------------------------------------------------------------------


class LoginRequest(BaseModel):
    """Request body for local login."""

    email: EmailStr
    password: str


class LoginResponse(BaseModel):
    """Response for successful login."""

    success: bool
    message: str
    user: dict[str, Any]


class UserResponse(BaseModel):
    """Current user response."""

    id: int
    email: str
    display_name: str | None
    timezone: str
    last_login_at: str | None


# -------------------------------------------------------------------------
# Dependencies
# -------------------------------------------------------------------------


async def get_current_user(
    session_id: Annotated[str | None, Cookie(alias=SESSION_COOKIE_NAME)] = None,
    db: AsyncSession = Depends(get_db),
) -> User:
    """Resolve the logged-in user from the session cookie.

    Raises:
        AuthenticationError: If the session is missing, expired or stale.
    """
    if not session_id:
        raise AuthenticationError("Not authenticated")

    session_data = await get_session(session_id)
    if not session_data:
        raise AuthenticationError("Session expired or invalid")

    user_id = session_data.get("user_id")
    if not user_id:
        raise AuthenticationError("Invalid session data")

    user = await db.get(User, user_id)
    if not user:
        raise AuthenticationError("User not found")

    return user


# -------------------------------------------------------------------------
# Endpoints
# -------------------------------------------------------------------------


@router.post("/login", response_model=LoginResponse)
async def login(
    request: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
) -> LoginResponse:
    """Login with email and password and set the session cookie."""
    result = await db.execute(select(User).where(User.email == request.email))
    user = result.scalar_one_or_none()

    if not user or not verify_password(request.password, user.password_hash):
        logger.info(f"Failed login attempt for {request.email}")
        raise AuthenticationError("Incorrect email or password")

    user.last_login_at = datetime.now(tz.utc)
    await db.commit()

    session_id = await create_session(
        user_id=user.id,
        user_data={
            "email": user.email,
            "display_name": user.display_name,
        },
    )

    set_session_cookie(response, session_id)

    return LoginResponse(
        success=True,
        message="Login successful",
        user={
            "id": user.id,
            "email": user.email,
            "display_name": user.display_name,
            "timezone": user.timezone,
        },
    )


@router.post("/logout")
async def logout(
    response: Response,
    session_id: Annotated[str | None, Cookie(alias=SESSION_COOKIE_NAME)] = None,
) -> dict[str, str]:
    """Logout and invalidate session."""
    if session_id:
        await delete_session(session_id)

    clear_session_cookie(response)

    return {"message": "Logged out successfully"}


@router.get("/me", response_model=UserResponse)
async def get_me(
    current_user: Annotated[User, Depends(get_current_user)],
) -> UserResponse:
    """Get current authenticated user."""
    return UserResponse(
        id=current_user.id,
        email=current_user.email,
        display_name=current_user.display_name,
        timezone=current_user.timezone,
        last_login_at=current_user.last_login_at.isoformat() if current_user.last_login_at else None,
    )
