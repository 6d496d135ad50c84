"""
RICHIEAT Backend — Database Session Management
================================================

What:  Async SQLAlchemy engine, session factory, FastAPI dependency and the
       start-up connection loop.
How:   An async engine with a bounded connection pool; a session dependency
       that commits on success and rolls back on error; a tenacity-driven
       reconnect loop with a fixed delay and no attempt limit.
Who:   Route handlers (via Depends), the health check and the app lifespan.

Connection Pooling:
    pool_size / max_overflow bound the number of concurrent connections.
    pool_pre_ping validates connections before use, so a database restart
    surfaces as a transparent reconnect instead of a failed request.
    SQLite (used by the test suite) manages its own pool and ignores these.
"""

import logging
from typing import Any, AsyncGenerator, Dict, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_never,
    wait_fixed,
)

from richieat.config import settings

logger = logging.getLogger(__name__)


def _engine_options(url: str) -> Dict[str, Any]:
    """Pool options for server databases; SQLite gets the driver defaults."""
    options: Dict[str, Any] = {"echo": settings.log_level == "DEBUG"}
    if url.startswith("sqlite"):
        return options
    options.update(
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=settings.db_pool_pre_ping,
        pool_recycle=3600,
    )
    return options


def build_engine(url: str) -> AsyncEngine:
    return create_async_engine(url, **_engine_options(url))


engine = build_engine(settings.database_url)

# expire_on_commit=False keeps attributes readable after the request commits.
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models (shared metadata for Alembic)."""
    pass


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    1. Creates a new session from the factory
    2. Yields it to the route handler
    3. On success: commits the transaction
    4. On error: rolls back and re-raises for the global error handler
    5. Always: closes the session (returns the connection to the pool)
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── Connectivity ──────────────────────────────────────────────────────────
class ConnectionState:
    """Last known connectivity, updated by the reconnect loop and the health check."""

    def __init__(self) -> None:
        self.connected = False
        self.attempts = 0

    def mark(self, connected: bool) -> None:
        if connected and not self.connected:
            logger.info("Database connection established")
        elif not connected and self.connected:
            logger.warning("Database connection lost")
        self.connected = connected


connection_state = ConnectionState()


async def ping(target: Optional[AsyncEngine] = None) -> bool:
    """Run SELECT 1; returns False instead of raising when the database is down."""
    target = target or engine
    try:
        async with target.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (OSError, SQLAlchemyError) as e:
        logger.warning("Database ping failed: %s", str(e))
        connection_state.mark(False)
        return False
    connection_state.mark(True)
    return True


async def connect_with_retry(
    target: Optional[AsyncEngine] = None,
    retry_delay: Optional[float] = None,
) -> None:
    """
    Block until the database answers, retrying forever with a fixed delay.

    Each attempt is logged; failures are logged before the retry sleep.
    Run from the lifespan as a background task so the HTTP surface (health
    check included) is available while the database is still unreachable.
    """
    target = target or engine
    delay = settings.db_retry_delay if retry_delay is None else retry_delay

    async for attempt in AsyncRetrying(
        wait=wait_fixed(delay),
        stop=stop_never,
        retry=retry_if_exception_type((OSError, SQLAlchemyError)),
        before_sleep=before_sleep_log(logger, logging.ERROR),
        reraise=True,
    ):
        with attempt:
            connection_state.attempts = attempt.retry_state.attempt_number
            logger.info(
                "Connecting to database (attempt %d)...",
                attempt.retry_state.attempt_number,
            )
            async with target.connect() as conn:
                await conn.execute(text("SELECT 1"))

    connection_state.mark(True)
    logger.info(
        "Database connected after %d attempt(s)", connection_state.attempts
    )


async def dispose_engine() -> None:
    """Close all pooled connections (application shutdown)."""
    await engine.dispose()
    connection_state.mark(False)
