"""
Alembic environment for the order flow schema.

The URL comes from DATABASE_URL when set, otherwise from database.yaml
plus DB_PASSWORD. Migrations run on the async engine; SQLite gets batch
mode so ALTER TABLE works on the flows and orders tables.
"""

import asyncio
import os
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config

from orderflow.backend.models import Base

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata

# Hosted Postgres URLs name the sync driver; the app needs asyncpg.
_ASYNC_SCHEMES = {
    "postgres://": "postgresql+asyncpg://",
    "postgresql://": "postgresql+asyncpg://",
}


def get_database_url() -> str:
    url = os.environ.get("DATABASE_URL")
    if not url:
        from orderflow.backend.core.config import get_database_url as configured_url

        return configured_url()
    for scheme, async_scheme in _ASYNC_SCHEMES.items():
        if url.startswith(scheme):
            return async_scheme + url[len(scheme):]
    return url


def _configure(url: str, **kwargs) -> None:
    context.configure(
        target_metadata=target_metadata,
        compare_type=True,
        compare_server_default=True,
        render_as_batch=url.startswith("sqlite"),
        **kwargs,
    )


def run_migrations_offline() -> None:
    """Emit SQL instead of executing it: `alembic upgrade head --sql`."""
    url = get_database_url()
    _configure(url, url=url, literal_binds=True, dialect_opts={"paramstyle": "named"})
    with context.begin_transaction():
        context.run_migrations()


def _migrate(connection: Connection, url: str) -> None:
    _configure(url, connection=connection)
    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    url = get_database_url()
    section = config.get_section(config.config_ini_section, {})
    section["sqlalchemy.url"] = url
    engine = async_engine_from_config(section, prefix="sqlalchemy.", poolclass=pool.NullPool)

    async with engine.connect() as connection:
        await connection.run_sync(_migrate, url)
    await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_async_migrations())
