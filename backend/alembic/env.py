"""Alembic environment for the movies database.

The URL always comes from diyapi Settings (DATABASE_URL), never from
alembic.ini, so migrations hit the same database as the API.
"""

import asyncio
from logging.config import fileConfig
from typing import Any

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine

import diyapi.models  # noqa: F401
from diyapi.config import settings
from diyapi.db.session import Base

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)


def _configure(**kwargs: Any) -> None:
    context.configure(
        target_metadata=Base.metadata,
        compare_type=True,
        **kwargs,
    )


def run_offline() -> None:
    """Write migration SQL to stdout: alembic upgrade head --sql"""
    _configure(
        url=settings.database_url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def _migrate(connection: Connection) -> None:
    _configure(connection=connection)
    with context.begin_transaction():
        context.run_migrations()


async def run_online() -> None:
    engine = create_async_engine(settings.database_url, poolclass=pool.NullPool)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_migrate)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    run_offline()
else:
    asyncio.run(run_online())
