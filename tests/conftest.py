import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool


def _configure_path() -> None:
    src_path = Path(__file__).resolve().parents[1] / "src"
    if src_path.exists():
        sys.path.insert(0, str(src_path))


_configure_path()

from loyalty_points.app import create_app  # noqa: E402
from loyalty_points.api.dependencies.loyalty import get_loyalty_service  # noqa: E402
from loyalty_points.db.session import create_schema  # noqa: E402
from loyalty_points.observability.loyalty import LoyaltyObservabilityStore  # noqa: E402
from loyalty_points.services.loyalty import InMemoryLoyaltyStore, LoyaltyPointsService  # noqa: E402
from loyalty_points.services.members import InMemoryMemberDirectory  # noqa: E402

FIXED_NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def directory() -> InMemoryMemberDirectory:
    return InMemoryMemberDirectory()


@pytest.fixture
def store() -> InMemoryLoyaltyStore:
    return InMemoryLoyaltyStore(lock_timeout_seconds=1.0)


@pytest.fixture
def observability() -> LoyaltyObservabilityStore:
    return LoyaltyObservabilityStore()


@pytest.fixture
def service(directory, store, observability, now) -> LoyaltyPointsService:
    return LoyaltyPointsService(directory, store, clock=lambda: now, observability=observability)


@pytest_asyncio.fixture
async def session_factory():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await create_schema(engine)

    factory = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)

    try:
        yield factory
    finally:
        await engine.dispose()


@pytest.fixture
def app_with_service(service):
    app = create_app()
    app.dependency_overrides[get_loyalty_service] = lambda: service

    try:
        yield app, service
    finally:
        app.dependency_overrides.clear()
