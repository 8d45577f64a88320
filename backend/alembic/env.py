"""
Alembic migration environment for the gateway tables.

  • The URL comes from mission_control.core.config, never alembic.ini.
  • Engines are built with core.database.build_engine(), so migrations get
    the same dialect options (SQLite busy timeout, Postgres pre-ping) as
    the app.
  • SQLite runs in batch mode because it cannot ALTER constraints in place.
"""

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import make_url

from mission_control.core.config import settings
from mission_control.core.database import Base, build_engine

# Register api_tokens, rate_limit_windows and agent_events on Base.metadata
import mission_control.models.agent_event  # noqa: F401
import mission_control.models.api_token  # noqa: F401
import mission_control.models.rate_limit  # noqa: F401

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata
database_url = settings.DATABASE_URL
batch_mode = make_url(database_url).get_backend_name() == "sqlite"


def run_migrations_offline() -> None:
    """Emit the migration SQL without connecting."""
    context.configure(
        url=database_url,
        target_metadata=target_metadata,
        literal_binds=True,
        render_as_batch=batch_mode,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection) -> None:  # type: ignore[no-untyped-def]
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        render_as_batch=batch_mode,
        compare_type=True,
    )

    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    connectable = build_engine(database_url, poolclass=pool.NullPool)

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_async_migrations())
