"""
Alembic environment for the notekeeper schema.

The target database is DATABASE_URL when set (any postgres:// form is
rewritten to the asyncpg driver), otherwise database.yaml plus
DB_PASSWORD. Importing notekeeper.backend.models registers users, notes
and tasks on Base.metadata for autogenerate.
"""

import asyncio
import os
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config

from notekeeper.backend.models import Base

ASYNC_SCHEME = "postgresql+asyncpg://"
SYNC_SCHEMES = ("postgres://", "postgresql://")

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)


def database_url() -> str:
    url = os.environ.get("DATABASE_URL")
    if not url:
        from notekeeper.backend.core.config import get_database_url

        return get_database_url()
    for scheme in SYNC_SCHEMES:
        if url.startswith(scheme):
            return ASYNC_SCHEME + url[len(scheme):]
    return url


def _configure(**kwargs) -> None:
    context.configure(
        target_metadata=Base.metadata,
        compare_type=True,
        compare_server_default=True,
        **kwargs,
    )
    with context.begin_transaction():
        context.run_migrations()


def _run_with_connection(connection: Connection) -> None:
    _configure(connection=connection)


async def _run_online() -> None:
    section = config.get_section(config.config_ini_section, {})
    section["sqlalchemy.url"] = database_url()
    engine = async_engine_from_config(section, prefix="sqlalchemy.", poolclass=pool.NullPool)
    async with engine.connect() as connection:
        await connection.run_sync(_run_with_connection)
    await engine.dispose()


if context.is_offline_mode():
    # alembic upgrade head --sql
    _configure(url=database_url(), literal_binds=True, dialect_opts={"paramstyle": "named"})
else:
    asyncio.run(_run_online())
