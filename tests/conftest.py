"""
Root Pytest Fixtures.

Every test that touches the database gets a brand-new schema built from
the models. In-memory SQLite is the default; point TEST_DATABASE_URL at a
PostgreSQL database to run the same tests against asyncpg:

    TEST_DATABASE_URL=postgresql+asyncpg://notekeeper:pw@localhost/notekeeper_test pytest
"""

import os
from collections.abc import AsyncGenerator

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from notekeeper.backend.models import Base

TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        # One shared connection, otherwise each session sees its own empty database
        return {"poolclass": StaticPool, "connect_args": {"check_same_thread": False}}
    return {}


@pytest.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    engine = create_async_engine(TEST_DATABASE_URL, **_engine_options(TEST_DATABASE_URL))
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def db_session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(db_engine, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db_session(
    db_session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """A session whose uncommitted work is rolled back after the test."""
    async with db_session_factory() as session:
        yield session
        await session.rollback()
