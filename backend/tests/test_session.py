"""Tests for Redis-backed login sessions."""

from unittest.mock import AsyncMock, patch

from fastapi import Response

from fittrack.core import session
from fittrack.core.session import SESSION_COOKIE_NAME, clear_session_cookie, set_session_cookie


class FakeRedis:
    """Just enough of redis.asyncio.Redis for the session store."""

    def __init__(self):
        self.data: dict[str, str] = {}
        self.ttls: dict[str, int] = {}

    async def setex(self, key: str, ttl: int, value: str) -> None:
        self.data[key] = value
        self.ttls[key] = ttl

    async def get(self, key: str):
        return self.data.get(key)

    async def delete(self, key: str) -> int:
        return 1 if self.data.pop(key, None) is not None else 0


class TestSessionStore:
    async def test_create_get_delete(self):
        fake = FakeRedis()
        with patch.object(session, "get_redis", AsyncMock(return_value=fake)):
            session_id = await session.create_session(7, {"email": "a@example.com"})

            stored = await session.get_session(session_id)
            assert stored["user_id"] == 7
            assert stored["email"] == "a@example.com"
            assert fake.ttls[f"session:{session_id}"] == session.settings.session_ttl_seconds

            assert await session.delete_session(session_id) is True
            assert await session.get_session(session_id) is None
            assert await session.delete_session(session_id) is False

    async def test_ids_are_unique(self):
        fake = FakeRedis()
        with patch.object(session, "get_redis", AsyncMock(return_value=fake)):
            first = await session.create_session(1, {})
            second = await session.create_session(1, {})

        assert first != second


class TestSessionCookie:
    def test_set_cookie(self):
        response = Response()

        set_session_cookie(response, "abc")

        header = response.headers["set-cookie"]
        assert header.startswith(f"{SESSION_COOKIE_NAME}=abc")
        assert "HttpOnly" in header
        assert f"Max-Age={session.settings.session_ttl_seconds}" in header

    def test_clear_cookie(self):
        response = Response()

        clear_session_cookie(response)

        header = response.headers["set-cookie"]
        assert header.startswith(f'{SESSION_COOKIE_NAME}=""')
        assert "Max-Age=0" in header
