"""
Database Configuration and Session Management

Provides async SQLAlchemy engine and session factory.
PostgreSQL (asyncpg) is the production target; SQLite (aiosqlite) is
supported for development and tests.
"""

import ssl
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Annotated, Any
from urllib.parse import parse_qs, urlencode, urlparse, urlunparse

from fastapi import Depends
from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from doc_registry.config import Settings, get_settings
from doc_registry.models.orm.base import Base  # noqa: F401 - imported for Alembic


def _prepare_asyncpg_url(url: str) -> tuple[str, dict]:
    """
    Prepare a database URL for asyncpg compatibility.

    asyncpg doesn't accept 'sslmode' as a URL query parameter - it requires
    SSL to be configured via connect_args instead. This function extracts
    sslmode from the URL and converts it to the appropriate SSL context.

    Args:
        url: PostgreSQL database URL (may contain sslmode parameter)

    Returns:
        Tuple of (cleaned_url without sslmode, connect_args dict with ssl config)
    """
    parsed = urlparse(url)
    query_params = parse_qs(parsed.query)
    connect_args: dict = {}

    if "sslmode" in query_params:
        sslmode = query_params.pop("sslmode")[0]

        if sslmode in ("require", "verify-ca", "verify-full"):
            ssl_context = ssl.create_default_context()

            if sslmode == "require":
                ssl_context.check_hostname = False
                ssl_context.verify_mode = ssl.CERT_NONE
            elif sslmode == "verify-ca":
                ssl_context.check_hostname = False
                ssl_context.verify_mode = ssl.CERT_REQUIRED

            connect_args["ssl"] = ssl_context
        elif sslmode == "prefer":
            connect_args["ssl"] = "prefer"

    new_query = urlencode(query_params, doseq=True)
    cleaned_url = urlunparse(parsed._replace(query=new_query))

    return cleaned_url, connect_args


def _enable_sqlite_pragmas(engine: AsyncEngine) -> None:
    """Turn on foreign key enforcement for every new SQLite connection."""

    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, _connection_record) -> None:
        cursor = dbapi_connection.cursor()
        try:
            cursor.execute("PRAGMA foreign_keys=ON")
        finally:
            cursor.close()


def build_engine(database_url: str, settings: Settings | None = None, **overrides: Any) -> AsyncEngine:
    """
    Create an async engine configured for the URL's backend.

    SQLite engines get NullPool, a busy timeout (so concurrent writers queue
    on the database lock instead of failing) and foreign keys enabled.

    Args:
        database_url: Async database URL
        settings: Optional settings override
        **overrides: Extra create_async_engine keyword arguments

    Returns:
        AsyncEngine instance
    """
    if settings is None:
        settings = get_settings()

    engine_kwargs: dict[str, Any] = {"echo": settings.debug}

    if make_url(database_url).get_backend_name() == "sqlite":
        engine_kwargs["poolclass"] = NullPool
        engine_kwargs["connect_args"] = {"timeout": settings.sqlite_busy_timeout_seconds}
        engine_kwargs.update(overrides)
        engine = create_async_engine(database_url, **engine_kwargs)
        _enable_sqlite_pragmas(engine)
        return engine

    database_url, connect_args = _prepare_asyncpg_url(database_url)
    engine_kwargs.update(
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        pool_pre_ping=True,
        connect_args=connect_args,
    )
    engine_kwargs.update(overrides)
    return create_async_engine(database_url, **engine_kwargs)


# Global engine and session factory (initialized on startup)
_engine: AsyncEngine | None = None
_async_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_engine(settings: Settings | None = None) -> AsyncEngine:
    """
    Get or create the async SQLAlchemy engine.

    Args:
        settings: Optional settings override (for testing)

    Returns:
        AsyncEngine instance
    """
    global _engine

    if _engine is None:
        if settings is None:
            settings = get_settings()
        _engine = build_engine(settings.database_url, settings)

    return _engine


def get_session_factory(settings: Settings | None = None) -> async_sessionmaker[AsyncSession]:
    """
    Get or create the async session factory.

    Args:
        settings: Optional settings override (for testing)

    Returns:
        async_sessionmaker instance
    """
    global _async_session_factory

    if _async_session_factory is None:
        engine = get_engine(settings)
        _async_session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    return _async_session_factory


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency for getting database sessions in FastAPI routes.

    Yields:
        AsyncSession that is committed on success and rolled back on error
    """
    session_factory = get_session_factory()
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


# Type alias for dependency injection
DbSession = Annotated[AsyncSession, Depends(get_db)]


@asynccontextmanager
async def get_db_context() -> AsyncGenerator[AsyncSession, None]:
    """
    Context manager for getting database sessions outside of FastAPI routes.

    Useful for scripts and CLI commands.

    Usage:
        async with get_db_context() as db:
            result = await db.execute(select(Document))
    """
    session_factory = get_session_factory()
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db() -> None:
    """
    Initialize database connection and verify connectivity.

    Called on application startup.
    """
    engine = get_engine()

    async with engine.begin() as conn:
        await conn.run_sync(lambda _: None)


async def close_db() -> None:
    """
    Close database connections.

    Called on application shutdown.
    """
    global _engine, _async_session_factory

    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _async_session_factory = None


def reset_db_state() -> None:
    """
    Reset database state (for testing).

    Clears the engine and session factory so they are recreated
    with fresh settings on next access.
    """
    global _engine, _async_session_factory
    _engine = None
    _async_session_factory = None
