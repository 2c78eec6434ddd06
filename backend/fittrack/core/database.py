"""Async database engine and session management."""

from datetime import datetime, timezone
from typing import Any, AsyncGenerator, Iterable

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from fittrack.core.config import get_settings

settings = get_settings()

engine = create_async_engine(
    settings.database_url,
    echo=settings.database_echo,
    pool_pre_ping=True,
)

# expire_on_commit=False keeps loaded attributes usable after commit in async code
async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Provide a database session per request.

    Handlers commit explicitly; anything left uncommitted is rolled back
    when the request fails.
    """
    async with async_session_maker() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


def build_upsert(
    session: AsyncSession,
    model: type[Base],
    values: dict[str, Any],
    conflict_columns: Iterable[str],
    update_columns: Iterable[str] | None = None,
):
    """INSERT ... ON CONFLICT DO UPDATE for the session's dialect.

    Conflicting rows get the new values of ``update_columns`` (default: every
    non-key column in ``values``) plus a fresh ``updated_at``.
    """
    conflict_columns = list(conflict_columns)
    insert = sqlite_insert if session.bind.dialect.name == "sqlite" else pg_insert

    stmt = insert(model).values(**values)
    if update_columns is None:
        update_columns = [name for name in values if name not in conflict_columns]

    set_ = {name: stmt.excluded[name] for name in update_columns}
    set_["updated_at"] = datetime.now(timezone.utc)
    return stmt.on_conflict_do_update(index_elements=conflict_columns, set_=set_)
