"""Async engine and session factory wiring."""

from __future__ import annotations

from functools import lru_cache

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from loyalty_points.core.settings import settings
from loyalty_points.db.base import Base


@lru_cache(maxsize=1)
def get_engine() -> AsyncEngine:
    return create_async_engine(settings.database_url, future=True)


@lru_cache(maxsize=1)
def get_session_factory() -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(get_engine(), expire_on_commit=False, class_=AsyncSession)


async def create_schema(engine: AsyncEngine) -> None:
    """Create loyalty tables that do not exist yet."""

    import loyalty_points.models  # noqa: F401  registers mapped tables

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
