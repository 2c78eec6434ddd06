"""API key issuance and verification.

Keys authenticate the health import endpoints on behalf of a user. Only the
SHA-256 digest of a key is stored; the plaintext is handed out once by
``issue_key`` and cannot be recovered afterwards.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fittrack.core.config import get_settings
from fittrack.core.errors import NotFoundError
from fittrack.core.security import API_KEY_MIN_LENGTH, generate_api_key, hash_api_key
from fittrack.models.api_key import ApiKey
from fittrack.observability import get_metrics_backend

logger = logging.getLogger(__name__)


class ApiKeyService:
    """Manage and verify API keys."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.metrics = get_metrics_backend()

    async def issue_key(self, user_id: int, name: Optional[str] = None) -> tuple[ApiKey, str]:
        """Create a key for a user.

        Returns:
            The stored record and the plaintext key. The plaintext is not
            persisted anywhere.
        """
        plaintext = generate_api_key()
        api_key = ApiKey(
            user_id=user_id,
            key_hash=hash_api_key(plaintext),
            name=(name or "").strip() or get_settings().default_api_key_name,
            is_active=True,
        )
        self.session.add(api_key)
        await self.session.commit()
        await self.session.refresh(api_key)

        logger.info(f"Issued API key {api_key.id} for user {user_id}")
        return api_key, plaintext

    async def list_keys(self, user_id: int) -> list[ApiKey]:
        result = await self.session.execute(
            select(ApiKey)
            .where(ApiKey.user_id == user_id)
            .order_by(ApiKey.created_at.desc(), ApiKey.id.desc())
        )
        return list(result.scalars().all())

    async def revoke_key(self, user_id: int, key_id: int) -> ApiKey:
        """Deactivate a key. Revoking an already inactive key is a no-op."""
        result = await self.session.execute(
            select(ApiKey).where(ApiKey.id == key_id, ApiKey.user_id == user_id)
        )
        api_key = result.scalar_one_or_none()
        if api_key is None:
            raise NotFoundError("API key not found")

        if api_key.is_active:
            api_key.is_active = False
            await self.session.commit()
            logger.info(f"Revoked API key {key_id} for user {user_id}")
        return api_key

    async def verify_key(self, presented_key: Any) -> Optional[int]:
        """Resolve a presented key to its owner's user id.

        Returns None for anything that is not an active key; never raises
        for a miss.
        """
        if not isinstance(presented_key, str) or len(presented_key) < API_KEY_MIN_LENGTH:
            logger.debug("Rejected malformed API key")
            self.metrics.observe_key_verification("rejected")
            return None

        try:
            key_hash = hash_api_key(presented_key)
        except UnicodeEncodeError:
            logger.debug("Rejected API key that is not valid UTF-8")
            self.metrics.observe_key_verification("rejected")
            return None

        result = await self.session.execute(
            select(ApiKey.id, ApiKey.user_id).where(
                ApiKey.key_hash == key_hash,
                ApiKey.is_active.is_(True),
            )
        )
        row = result.first()
        if row is None:
            logger.debug("Rejected unknown or inactive API key")
            self.metrics.observe_key_verification("rejected")
            return None

        await self._touch(row.id)
        self.metrics.observe_key_verification("valid")
        return row.user_id

    async def _touch(self, key_id: int) -> None:
        """Record last use. Failure here must not fail verification."""
        try:
            await self.session.execute(
                update(ApiKey)
                .where(ApiKey.id == key_id)
                .values(last_used_at=datetime.now(timezone.utc))
            )
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.warning(f"Failed to update last_used_at for API key {key_id}: {e}")
