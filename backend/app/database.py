"""
SVG Holder Backend — Database Session Management
==================================================

What:  Async SQLAlchemy engine, session factory, and the ORM base class.
How:   `Database` owns one engine and one session factory. It is created by
       the application factory, kept on `app.state`, handed to services at
       construction, and disposed in the lifespan shutdown hook.
Who:   SvgService opens one session per operation via `Database.session()`.

Connection Lifecycle:
    create_async_engine() does not connect; the first query opens the pool.
    dispose() closes every pooled connection on shutdown.

Connection Pooling Strategy (server databases only):
    pool_size / max_overflow come from settings.
    pool_pre_ping validates connections before use (catches stale connections).
    pool_recycle=3600 recycles connections every hour.
    SQLite URLs get SQLAlchemy's default pool (used by the test suite).
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Dict, Optional

from sqlalchemy import DateTime, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.types import TypeDecorator

from app.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Registers models with one shared metadata object, which Alembic reads
    for migrations and `Database.create_all()` uses to build tables.
    """
    pass


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware timestamp that always round-trips as UTC.

    PostgreSQL stores TIMESTAMP WITH TIME ZONE natively; SQLite drops the
    offset, so values read back naive are re-tagged as UTC.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: Optional[datetime], dialect) -> Optional[datetime]:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def process_result_value(self, value: Optional[datetime], dialect) -> Optional[datetime]:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class Database:
    """
    Process-wide database handle: one engine, one session factory.

    Example:
        database = Database(settings)
        async with database.session() as session:
            store = SvgStore(session)
            ...
        await database.dispose()
    """

    def __init__(self, config: Optional[Settings] = None):
        self.config = config or default_settings
        self.engine: AsyncEngine = create_async_engine(
            self.config.database_url,
            **self._engine_options(),
        )
        # expire_on_commit=False: records stay readable after the session commits
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    def _engine_options(self) -> Dict[str, Any]:
        options: Dict[str, Any] = {
            # Echo SQL queries in DEBUG mode for development visibility
            "echo": self.config.log_level == "DEBUG",
        }
        if not self.config.is_sqlite:
            options.update(
                pool_size=self.config.db_pool_size,
                max_overflow=self.config.db_max_overflow,
                pool_pre_ping=self.config.db_pool_pre_ping,
                pool_recycle=3600,
            )
        return options

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """
        Provide a transactional session for one unit of work.

        How it works:
            1. Creates a new session from the factory
            2. Yields it to the caller (the caller performs queries)
            3. On success: commits the transaction
            4. On error: rolls back and re-raises
            5. Always: closes the session (returns connection to pool)
        """
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    async def create_all(self) -> None:
        """Create every table registered on Base.metadata (idempotent)."""
        # Import models so they register with Base before create_all
        from app.models import svg  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database schema ensured")

    async def ping(self) -> bool:
        """Run SELECT 1; True when the database answers."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.warning("Database ping failed: %s", str(e))
            return False

    async def dispose(self) -> None:
        """Close all pooled connections (called during application shutdown)."""
        await self.engine.dispose()
        logger.info("Database engine disposed")
