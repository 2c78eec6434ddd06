"""Dependencies for API-key authenticated endpoints."""

import json
import logging

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from fittrack.core.database import get_db
from fittrack.core.errors import AuthenticationError
from fittrack.models.user import User
from fittrack.services.api_keys import ApiKeyService

logger = logging.getLogger(__name__)

# auto_error=False: the key may also arrive in the JSON body
_bearer_scheme = HTTPBearer(auto_error=False)


async def _body_api_key(request: Request):
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None
    if isinstance(body, dict):
        return body.get("api_key")
    return None


async def get_ingest_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Resolve the user behind an import API key.

    The ``Authorization: Bearer`` header wins over an ``api_key`` body field.
    Runs before the body is validated, so a bad key is always a 401 and
    nothing is written.

    Raises:
        AuthenticationError: Missing, unknown or revoked key.
    """
    presented = credentials.credentials if credentials else await _body_api_key(request)
    if not presented:
        raise AuthenticationError(
            "Missing API key. Use Authorization: Bearer <key> header."
        )

    user_id = await ApiKeyService(db).verify_key(presented)
    if user_id is None:
        raise AuthenticationError()

    user = await db.get(User, user_id)
    if user is None:
        logger.warning(f"API key resolved to missing user {user_id}")
        raise AuthenticationError()

    return user
