"""Pytest configuration and fixtures for workpaper.

Environment defaults are set before importing workpaper.main so Settings
validate without a .env file: no SQL backend, no Redis, no telemetry.
HTTP tests override the use-case dependencies with in-memory fakes; only
tests marked requires_db talk to Postgres.
"""

import os

os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("DATABASE_BACKEND", "none")
os.environ.setdefault("REDIS_ENABLED", "false")
os.environ.setdefault("TELEMETRY_ENABLED", "false")

import pytest
from fakes import RecordingPublisher, build_workflow, standard_db
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from workpaper.core.config import get_settings
from workpaper.core.limiter import limiter
from workpaper.infrastructure.persistence import database

get_settings.cache_clear()

from workpaper.main import app  # noqa: E402


@pytest.fixture
async def client() -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI). Overrides are cleared afterwards."""
    limiter.reset()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def publisher() -> RecordingPublisher:
    return RecordingPublisher()


@pytest.fixture
def world(publisher: RecordingPublisher):
    """Standard project with every use case wired on in-memory repositories."""
    return build_workflow(standard_db(), publisher)


@pytest.fixture
async def db_session() -> AsyncSession:
    """Database session for repository tests. Rolls back after the test.

    Requires DATABASE_BACKEND=postgres and DATABASE_URL with migrations
    applied (alembic upgrade head). Skips otherwise.
    """
    database._ensure_engine()
    if database.AsyncSessionLocal is None:
        pytest.skip(
            "Postgres not configured: set DATABASE_BACKEND=postgres and DATABASE_URL, "
            "then run: alembic upgrade head"
        )
    async with database.AsyncSessionLocal() as session:
        yield session
        await session.rollback()
