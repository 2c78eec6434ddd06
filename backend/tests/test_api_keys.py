"""Tests for API key issuance, verification and management endpoints."""

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fittrack.core.errors import NotFoundError
from fittrack.core.security import hash_api_key
from fittrack.models import ApiKey, User
from fittrack.services.api_keys import ApiKeyService


class TestApiKeyService:
    """Service-level behaviour of ApiKeyService."""

    async def test_issue_stores_only_hash(self, db_session: AsyncSession, test_user: User):
        record, plaintext = await ApiKeyService(db_session).issue_key(test_user.id, "Phone")

        assert record.key_hash == hash_api_key(plaintext)
        assert record.key_hash != plaintext
        assert record.name == "Phone"
        assert record.is_active is True
        assert record.last_used_at is None

    async def test_issue_uses_default_name(self, db_session: AsyncSession, test_user: User):
        record, _ = await ApiKeyService(db_session).issue_key(test_user.id)

        assert record.name == "Health Auto Export"

    async def test_verify_returns_owner(self, db_session: AsyncSession, test_user: User, api_key):
        user_id = test_user.id
        _, plaintext = api_key

        assert await ApiKeyService(db_session).verify_key(plaintext) == user_id

    async def test_verify_records_last_use(self, db_session: AsyncSession, api_key):
        record, plaintext = api_key
        key_id = record.id

        await ApiKeyService(db_session).verify_key(plaintext)

        last_used = await db_session.scalar(select(ApiKey.last_used_at).where(ApiKey.id == key_id))
        assert last_used is not None

    async def test_verify_rejects_revoked_key(
        self, db_session: AsyncSession, test_user: User, api_key
    ):
        record, plaintext = api_key
        service = ApiKeyService(db_session)

        await service.revoke_key(test_user.id, record.id)

        assert await service.verify_key(plaintext) is None

    @pytest.mark.parametrize("presented", [None, "", "short", 12345, "a" * 31, ["x" * 64]])
    async def test_verify_rejects_malformed_input(self, db_session: AsyncSession, presented):
        assert await ApiKeyService(db_session).verify_key(presented) is None

    async def test_verify_rejects_key_that_is_not_utf8(self, db_session: AsyncSession, api_key):
        assert await ApiKeyService(db_session).verify_key("\ud800" * 40) is None

    async def test_verify_rejects_unknown_key(self, db_session: AsyncSession, api_key):
        assert await ApiKeyService(db_session).verify_key("f" * 64) is None

    async def test_revoke_other_users_key_is_not_found(
        self, db_session: AsyncSession, other_user: User, api_key
    ):
        record, _ = api_key

        with pytest.raises(NotFoundError):
            await ApiKeyService(db_session).revoke_key(other_user.id, record.id)

    async def test_revoke_is_idempotent(self, db_session: AsyncSession, test_user: User, api_key):
        record, _ = api_key
        service = ApiKeyService(db_session)

        await service.revoke_key(test_user.id, record.id)
        again = await service.revoke_key(test_user.id, record.id)

        assert again.is_active is False


class TestApiKeyEndpoints:
    """Tests for /api/api-keys."""

    async def test_create_returns_plaintext_once(
        self, auth_client: AsyncClient, db_session: AsyncSession
    ):
        response = await auth_client.post("/api/api-keys", json={})

        assert response.status_code == 201
        data = response.json()
        assert data["success"] is True
        assert data["name"] == "Health Auto Export"
        assert len(data["api_key"]) == 64

        stored = await db_session.scalar(select(ApiKey.key_hash).where(ApiKey.id == data["id"]))
        assert stored == hash_api_key(data["api_key"])

    async def test_create_with_name(self, auth_client: AsyncClient):
        response = await auth_client.post("/api/api-keys", json={"name": "iPhone Shortcut"})

        assert response.status_code == 201
        assert response.json()["name"] == "iPhone Shortcut"

    async def test_list_never_exposes_secret(self, auth_client: AsyncClient):
        created = (await auth_client.post("/api/api-keys", json={"name": "One"})).json()

        response = await auth_client.get("/api/api-keys")

        assert response.status_code == 200
        keys = response.json()
        assert [k["id"] for k in keys] == [created["id"]]
        assert set(keys[0]) == {"id", "name", "created_at", "last_used_at", "is_active"}
        assert created["api_key"] not in response.text

    async def test_list_only_own_keys(
        self, auth_client: AsyncClient, db_session: AsyncSession, other_user: User
    ):
        await ApiKeyService(db_session).issue_key(other_user.id, "Not mine")

        response = await auth_client.get("/api/api-keys")

        assert response.json() == []

    async def test_revoke(self, auth_client: AsyncClient):
        created = (await auth_client.post("/api/api-keys", json={})).json()

        response = await auth_client.delete(f"/api/api-keys/{created['id']}")

        assert response.status_code == 200
        assert response.json()["is_active"] is False

    async def test_revoke_unknown_key(self, auth_client: AsyncClient):
        response = await auth_client.delete("/api/api-keys/9999")

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    async def test_requires_session(self, client: AsyncClient):
        response = await client.post("/api/api-keys", json={})

        assert response.status_code == 401
        assert response.json()["error"] == "unauthorized"
