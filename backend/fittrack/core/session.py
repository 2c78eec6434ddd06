"""Login sessions for the tracking endpoints.

A session is a JSON blob in Redis under ``session:<id>`` that expires after
``session_ttl_seconds``; the id travels in an HTTP-only cookie. API-key
requests never touch this module.
"""

import json
import secrets
from datetime import datetime, timezone
from typing import Any, Optional

import redis.asyncio as redis
from fastapi import Response

from fittrack.core.config import get_settings

settings = get_settings()

SESSION_COOKIE_NAME = "session_id"
SESSION_KEY_PREFIX = "session:"

_redis_client: Optional[redis.Redis] = None


async def get_redis() -> redis.Redis:
    global _redis_client
    if _redis_client is None:
        _redis_client = redis.from_url(
            settings.redis_url,
            encoding="utf-8",
            decode_responses=True,
        )
    return _redis_client


def _key(session_id: str) -> str:
    return f"{SESSION_KEY_PREFIX}{session_id}"


async def create_session(user_id: int, user_data: dict[str, Any]) -> str:
    """Store a new session for ``user_id`` and return its id."""
    session_id = secrets.token_urlsafe(32)
    payload = {
        "user_id": user_id,
        "created_at": datetime.now(timezone.utc).isoformat(),
        **user_data,
    }

    client = await get_redis()
    await client.setex(_key(session_id), settings.session_ttl_seconds, json.dumps(payload))
    return session_id


async def get_session(session_id: str) -> Optional[dict[str, Any]]:
    """Session payload, or None once it has expired or been deleted."""
    client = await get_redis()
    data = await client.get(_key(session_id))
    return json.loads(data) if data is not None else None


async def delete_session(session_id: str) -> bool:
    client = await get_redis()
    return await client.delete(_key(session_id)) > 0


def set_session_cookie(response: Response, session_id: str) -> None:
    """Attach the session cookie; it lives exactly as long as the Redis entry."""
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=session_id,
        httponly=True,
        secure=settings.cookie_secure,
        samesite=settings.cookie_samesite,
        max_age=settings.session_ttl_seconds,
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        key=SESSION_COOKIE_NAME,
        httponly=True,
        secure=settings.cookie_secure,
        samesite=settings.cookie_samesite,
    )
