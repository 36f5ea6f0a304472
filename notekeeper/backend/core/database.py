"""
Database Engine and Sessions.

The async engine is built on first use rather than at import, so modules
that only need models or schemas import cleanly without config/.env.
One session per request: committed when the handler returns, rolled back
when it raises.
"""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from notekeeper.backend.core.logging import get_logger

logger = get_logger(__name__)

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_engine() -> AsyncEngine:
    global _engine
    if _engine is None:
        from notekeeper.backend.core.config import get_app_config, get_database_url

        db = get_app_config().database
        _engine = create_async_engine(
            get_database_url(),
            pool_size=db.pool_size,
            max_overflow=db.max_overflow,
            pool_timeout=db.pool_timeout,
            pool_recycle=db.pool_recycle,
            echo=db.echo,
            echo_pool=db.echo_pool,
        )
        logger.debug("Database engine created", extra={"host": db.host, "db": db.name})
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Sessions keep attributes loaded after commit so responses can serialise them."""
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(get_engine(), expire_on_commit=False)
    return _session_factory


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency. Use the DbSession alias from core.dependencies."""
    async with get_session_factory()() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        await session.commit()


async def dispose_engine() -> None:
    """Close pooled connections. Called from the app lifespan on shutdown."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
        logger.info("Database engine disposed")
    _engine = None
    _session_factory = None
