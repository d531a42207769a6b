"""
Async engine and sessions.

Nothing connects at import time: the engine is built from database.yaml
and DB_PASSWORD on first use, so the CLI and the tests can import models
and services without a configured database.
"""

from collections.abc import AsyncGenerator
from functools import lru_cache
from typing import Any

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from orderflow.backend.core.logging import get_logger

logger = get_logger(__name__)


def _pool_options() -> dict[str, Any]:
    from orderflow.backend.core.config import get_app_config

    db = get_app_config().database
    if db.driver.startswith("sqlite"):
        return {"echo": db.echo}
    return {
        "echo": db.echo,
        "pool_size": db.pool_size,
        "max_overflow": db.max_overflow,
        "pool_timeout": db.pool_timeout,
        "pool_recycle": db.pool_recycle,
        "pool_pre_ping": True,
    }


@lru_cache
def get_engine() -> AsyncEngine:
    from orderflow.backend.core.config import get_database_url

    options = _pool_options()
    engine = create_async_engine(get_database_url(), **options)
    logger.debug("Database engine created", extra={"dialect": engine.dialect.name, **options})
    return engine


@lru_cache
def get_session_factory() -> async_sessionmaker[AsyncSession]:
    # Services hand ORM objects to response schemas after commit.
    return async_sessionmaker(get_engine(), expire_on_commit=False)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency: one session per request.

    Commits once the endpoint returns and rolls back if it raises, so
    repositories only ever flush.
    """
    async with get_session_factory()() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        await session.commit()


async def create_all_tables() -> None:
    """Create every table from the model metadata; development databases only."""
    from orderflow.backend.models import Base

    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables created", extra={"tables": sorted(Base.metadata.tables)})


async def dispose_engine() -> None:
    """Close pooled connections; the next get_engine() builds a fresh engine."""
    if get_engine.cache_info().currsize:
        await get_engine().dispose()
    get_engine.cache_clear()
    get_session_factory.cache_clear()
