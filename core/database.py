"""Async SQLAlchemy engine and session management.

Provides the storage gateway used by every repository:
- Connection pooling sized from DatabaseConfig (idle/active/idle-timeout)
- A session factory shared by the unit-of-work and read paths
- Schema creation and pool disposal hooks for the app lifespan

The Database object is constructed explicitly from config at startup and
stored on ``app.state``; nothing here is module-global.
"""

from typing import Any

import structlog
from fastapi import Request
from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from patterns.domain_config import DatabaseConfig

logger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Engine options
# ---------------------------------------------------------------------------

def engine_options(config: DatabaseConfig) -> dict[str, Any]:
    """Translate pool settings into create_async_engine() keyword args.

    max_idle_connections is the number of pooled connections kept open;
    max_active_connections caps pooled + overflow connections. SQLite
    engines use SQLAlchemy's default pool and ignore the sizing.
    """
    options: dict[str, Any] = {"echo": config.echo, "pool_pre_ping": True}
    if make_url(config.url).get_backend_name() == "sqlite":
        return options

    pool_size = max(config.max_idle_connections, 1)
    options.update(
        pool_size=pool_size,
        max_overflow=max(config.max_active_connections - pool_size, 0),
        pool_recycle=config.max_idle_time,
        pool_timeout=config.timeout,
    )
    return options


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------

class Database:
    """Engine + session factory for one relational store."""

    def __init__(self, config: DatabaseConfig, engine: AsyncEngine | None = None):
        self.config = config
        self.engine = engine or create_async_engine(config.url, **engine_options(config))
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    async def init_db(self) -> None:
        """Create tables from models (idempotent)."""
        from core.models.base import Base
        import verticals.bookstore.models.db_models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("database.schema_ready", backend=self.engine.dialect.name)

    async def ping(self) -> bool:
        """Return True when a pooled connection can run a trivial query."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except Exception as exc:
            logger.warning("database.ping_failed", error=str(exc))
            return False
        return True

    async def close(self) -> None:
        """Dispose of the connection pool on shutdown."""
        await self.engine.dispose()


# ---------------------------------------------------------------------------
# FastAPI dependency
# ---------------------------------------------------------------------------

def get_database(request: Request) -> Database:
    """Return the Database the app was created with."""
    return request.app.state.database
