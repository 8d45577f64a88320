"""
Async database engine, session factory, and ORM base.

Rules enforced:
  • Every DB call goes through AsyncSession.
  • Sessions are request-scoped via FastAPI's Depends(get_db_session).
  • Work that outlives a request (token usage stamps) opens its own
    session from async_session_factory.
  • The app, Alembic and the test suite all build engines through
    build_engine(), so dialect-specific options live in one place.

Postgres (asyncpg) is the production store. SQLite (aiosqlite) is
supported for local runs and tests: writers there serialize on the
database lock, so concurrent rate-limit checks wait for it instead of
failing with "database is locked".
"""

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from mission_control.core.config import settings

# Seconds a SQLite writer waits for the database lock
SQLITE_BUSY_TIMEOUT = 30


def engine_options(database_url: str) -> dict[str, Any]:
    """Dialect-specific keyword arguments for create_async_engine()."""
    if make_url(database_url).get_backend_name() == "sqlite":
        return {"connect_args": {"timeout": SQLITE_BUSY_TIMEOUT}}
    # pool_pre_ping: drop stale server connections before reuse
    return {"pool_pre_ping": True}


def build_engine(database_url: str, **overrides: Any) -> AsyncEngine:
    options = {"echo": settings.DEBUG, **engine_options(database_url)}
    options.update(overrides)
    return create_async_engine(database_url, **options)


async def ping_database(target: AsyncEngine) -> bool:
    """True when `SELECT 1` succeeds on the given engine."""
    async with target.connect() as conn:
        await conn.execute(text("SELECT 1"))
    return True


# ── Engine ──────────────────────────────────────────────────
engine = build_engine(settings.DATABASE_URL)

# ── Session factory ─────────────────────────────────────────
async_session_factory = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,  # token rows are read after commit
)


# ── ORM Base ────────────────────────────────────────────────
class Base(DeclarativeBase):
    """Shared declarative base for api_tokens, rate_limit_windows, agent_events."""


# ── Dependency ──────────────────────────────────────────────
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield one session per request. Services commit their own work."""
    async with async_session_factory() as session:
        yield session
