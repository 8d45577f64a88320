"""Global pytest fixtures for testing."""

import contextlib
import os
from collections.abc import AsyncGenerator, AsyncIterator, Callable
from pathlib import Path
from typing import Any

# Settings are read at import time — point them at SQLite before importing the app
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
)
from sqlalchemy.pool import NullPool

import mission_control.models.agent_event  # noqa: F401
import mission_control.models.api_token  # noqa: F401
import mission_control.models.rate_limit  # noqa: F401
from mission_control.auth.dependencies import get_clock, get_usage_recorder
from mission_control.auth.session import issue_session_token
from mission_control.core.config import Settings, get_settings
from mission_control.core.database import Base, build_engine, get_db_session
from mission_control.main import app
from mission_control.services.token_store import TokenUsageRecorder

TEST_SESSION_SECRET = "test-session-secret-0123456789abcdef"
START_MS = 1_760_000_000_000


class FakeClock:
    """Deterministic epoch-ms clock for admission tests."""

    def __init__(self, start: int = START_MS):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest_asyncio.fixture
async def test_engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """File-backed SQLite so background sessions see committed rows."""
    engine = build_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'mission_control_test.db'}",
        echo=False,
        poolclass=NullPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest_asyncio.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def usage_recorder(
    session_factory: async_sessionmaker[AsyncSession],
    clock: FakeClock,
) -> AsyncGenerator[TokenUsageRecorder, None]:
    recorder = TokenUsageRecorder(session_factory, clock=clock)
    yield recorder
    await recorder.wait_idle()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_client(
    session_factory: async_sessionmaker[AsyncSession],
    usage_recorder: TokenUsageRecorder,
    clock: FakeClock,
) -> Callable[..., contextlib.AbstractAsyncContextManager[AsyncClient]]:
    """
    Build an HTTP client against the app with test overrides.

    Keyword arguments are Settings fields, e.g.
    `make_client(MISSION_CONTROL_AUTH_REQUIRED=True)`.
    """

    @contextlib.asynccontextmanager
    async def _make(**settings_overrides: Any) -> AsyncIterator[AsyncClient]:
        test_settings = Settings(
            DATABASE_URL="sqlite+aiosqlite:///:memory:",
            SESSION_SECRET_KEY=TEST_SESSION_SECRET,
            **settings_overrides,
        )

        async def override_get_session() -> AsyncGenerator[AsyncSession, None]:
            async with session_factory() as session:
                yield session

        app.dependency_overrides[get_db_session] = override_get_session
        app.dependency_overrides[get_settings] = lambda: test_settings
        app.dependency_overrides[get_usage_recorder] = lambda: usage_recorder
        app.dependency_overrides[get_clock] = lambda: clock

        transport = ASGITransport(app=app)
        try:
            async with AsyncClient(transport=transport, base_url="http://test") as ac:
                yield ac
        finally:
            app.dependency_overrides.clear()

    return _make


@pytest.fixture
def session_headers() -> Callable[..., dict[str, str]]:
    """Authorization header carrying a session JWT for a tenant."""

    def _headers(tenant_id: str, **claims: str) -> dict[str, str]:
        token = issue_session_token(tenant_id, TEST_SESSION_SECRET, **claims)
        return {"Authorization": f"Bearer {token}"}

    return _headers
