"""
Database session management.

WHY: Async database sessions are required for FastAPI's async/await pattern.
The engine lives in an explicitly constructed Database handle, created when
the application starts and disposed (pool drained) when it stops, instead
of a process-wide global.
"""

import logging
from typing import AsyncGenerator, Optional

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from helpdesk.core.config import Settings
from helpdesk.core.exceptions import StoreUnavailableError

logger = logging.getLogger(__name__)


class Database:
    """
    Owner of the async engine and its session factory.

    WHY: One handle per application instance makes the pool lifecycle
    explicit: create at startup, dispose at shutdown, and hand a fresh
    AsyncSession to each request.
    """

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        # WHY: expire_on_commit=False prevents lazy-loading issues after commit.
        # autoflush=False gives explicit control over when SQL is emitted.
        self.session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        """
        Build the engine from settings.

        WHY: pool_pre_ping recycles stale connections. The pool is bounded
        (no overflow) and waits at most DB_POOL_TIMEOUT seconds for a free
        connection, after which SQLAlchemy raises TimeoutError, reported to
        the caller as StoreUnavailableError.
        """
        engine = create_async_engine(
            settings.async_database_url,
            echo=settings.DEBUG,
            pool_pre_ping=True,
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=0,
            pool_timeout=settings.DB_POOL_TIMEOUT,
            pool_recycle=settings.DB_POOL_RECYCLE,
        )
        return cls(engine)

    async def ping(self) -> None:
        """Run SELECT 1 against the pool."""
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def dispose(self) -> None:
        """Close all pooled connections."""
        await self.engine.dispose()
        logger.info("Database pool closed")


def get_database(request: Request) -> Database:
    """
    Return the Database handle attached to the running application.

    Raises:
        StoreUnavailableError: If the application was started without one
    """
    database: Optional[Database] = getattr(request.app.state, "database", None)
    if database is None:
        raise StoreUnavailableError(message="Database is not initialised")
    return database


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency to get database session.

    WHY: FastAPI dependency injection ensures each request gets its own
    database session, committed when the handler returns and rolled back
    when it raises.

    Yields:
        AsyncSession: Database session for the request
    """
    database = get_database(request)
    async with database.session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
