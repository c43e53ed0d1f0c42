"""
printdesk.infra.database.engine – engine, session factory and schema bootstrap.

Each DatabaseOrderStore owns its engine; nothing here is module-global.
Plain ``postgresql://`` / ``postgres://`` DSNs are routed through asyncpg.
"""
from __future__ import annotations

import logging
import re
from typing import Optional

import asyncpg
from sqlalchemy.engine import URL, make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from printdesk.config import DatabaseConfig
from printdesk.infra.database.models import Base

logger = logging.getLogger(__name__)

_SAFE_DB_NAME = re.compile(r"^\w+$", re.ASCII)
_MAINTENANCE_DB = "postgres"


def async_url(raw: str) -> URL:
    """Parse ``raw`` and force the asyncpg driver on PostgreSQL URLs."""
    if raw.startswith("postgres://"):
        raw = "postgresql://" + raw[len("postgres://"):]
    url = make_url(raw)
    if url.get_backend_name() == "postgresql" and url.get_driver_name() != "asyncpg":
        url = url.set(drivername="postgresql+asyncpg")
    return url


async def ensure_database_exists(config: DatabaseConfig) -> None:
    """
    ``CREATE DATABASE`` for the configured PostgreSQL database when it is missing.

    Connects to the maintenance database with the same credentials. Does
    nothing for SQLite, for odd database names, or when the server cannot be
    reached (the engine will then report the real error).
    """
    if config.is_sqlite:
        return
    url = async_url(config.url)
    name = url.database or ""
    if not name or name == _MAINTENANCE_DB:
        return
    if not _SAFE_DB_NAME.match(name):
        logger.warning("not creating database with unusual name %r", name)
        return

    dsn = url.set(drivername="postgresql", database=_MAINTENANCE_DB).render_as_string(hide_password=False)
    try:
        conn = await asyncpg.connect(dsn)
    except (OSError, asyncpg.PostgresError) as exc:
        logger.debug("maintenance db unreachable, skipping create: %s", exc)
        return
    try:
        exists = await conn.fetchval("SELECT 1 FROM pg_database WHERE datname = $1", name)
        if not exists:
            await conn.execute(f'CREATE DATABASE "{name}"')
            logger.info("created database %s", name)
    finally:
        await conn.close()


def build_engine(
    config: DatabaseConfig,
    *,
    echo: Optional[bool] = None,
    use_null_pool: bool = False,
) -> AsyncEngine:
    """Async engine for ``config``. SQLite always gets NullPool."""
    url = async_url(config.url)
    echo = config.echo if echo is None else echo

    if use_null_pool or config.is_sqlite:
        logger.debug("engine for %s without pooling", url.get_backend_name())
        return create_async_engine(url, echo=echo, poolclass=NullPool)

    logger.info("engine for %s pool=%d+%d", url.get_backend_name(), config.pool_size, config.max_overflow)
    return create_async_engine(
        url,
        echo=echo,
        pool_size=config.pool_size,
        max_overflow=config.max_overflow,
        pool_timeout=config.pool_timeout,
        pool_recycle=config.pool_recycle,
        pool_pre_ping=True,
        connect_args={"server_settings": {"application_name": "printdesk"}},
    )


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # Rows are converted to pydantic models after commit, so keep them loaded
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=False)


async def init_db(engine: AsyncEngine, *, drop_all: bool = False) -> None:
    """Create missing tables. Schema changes beyond that need a migration."""
    async with engine.begin() as conn:
        if drop_all:
            logger.warning("dropping every printdesk table")
            await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    logger.info("database schema ready")
