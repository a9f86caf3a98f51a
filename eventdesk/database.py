"""Async database engine, sessions and store access helpers."""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from eventdesk.config import get_settings
from eventdesk.errors import StoreUnavailableError

logger = logging.getLogger(__name__)

settings = get_settings()

# Global engine and session factory
_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_engine() -> AsyncEngine:
    """Get the async engine, creating it on first use."""
    global _engine
    if _engine is None:
        _engine = create_async_engine(
            settings.database_url,
            echo=settings.DB_ECHO,
            pool_pre_ping=True,
        )
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get the session factory bound to the global engine."""
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(
            get_engine(),
            expire_on_commit=False,
        )
    return _session_factory


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding a request-scoped session."""
    async with get_session_factory()() as session:
        yield session


@asynccontextmanager
async def get_db_context() -> AsyncGenerator[AsyncSession, None]:
    """Session context for code running outside a request."""
    async with get_session_factory()() as session:
        yield session


async def close_db() -> None:
    """Dispose of the engine and its pool."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _session_factory = None


async def execute_with_retry(
    db: AsyncSession,
    statement: Any,
    attempts: int | None = None,
    timeout_seconds: float | None = None,
) -> Any:
    """
    Execute a statement with a per-attempt timeout and bounded retries.

    Only transient failures (driver operational errors and timeouts) are
    retried; anything else propagates unchanged.

    Args:
        db: Session to execute on
        statement: SQLAlchemy executable
        attempts: Maximum number of attempts
        timeout_seconds: Timeout applied to each attempt

    Returns:
        The SQLAlchemy result.

    Raises:
        StoreUnavailableError: If every attempt failed.
    """
    attempts = attempts or settings.STORE_RETRY_ATTEMPTS
    timeout_seconds = timeout_seconds or settings.STORE_TIMEOUT_SECONDS
    attempt = 0

    while True:
        attempt += 1
        try:
            return await asyncio.wait_for(db.execute(statement), timeout_seconds)
        except (OperationalError, asyncio.TimeoutError) as exc:
            if attempt >= attempts:
                logger.error(f"Store query failed after {attempt} attempts: {exc}")
                raise StoreUnavailableError() from exc

            logger.warning(
                f"Transient store error on attempt {attempt}/{attempts}: {exc}"
            )
            await db.rollback()
            await asyncio.sleep(settings.STORE_RETRY_DELAY_MS * attempt / 1000)
