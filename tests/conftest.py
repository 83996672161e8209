"""
Pytest fixtures for Document Registry testing infrastructure.

This module provides:
1. Database fixtures (a fresh SQLite database per test via aiosqlite)
2. Authentication fixtures (principals and signed bearer tokens)
3. HTTP client fixtures bound to the test database
"""

import os
from collections.abc import AsyncGenerator, Callable
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

# Set environment variables BEFORE any imports that might load settings
# This must happen at module level, not in fixtures, to run before test collection
os.environ.setdefault("DOC_REGISTRY_ENVIRONMENT", "testing")
os.environ.setdefault("DOC_REGISTRY_SECRET_KEY", "test-secret-key-for-testing-must-be-32-chars")
os.environ.setdefault("DOC_REGISTRY_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("DOC_REGISTRY_ADMIN_USERNAMES", "root")

from doc_registry.core.auth import UserPrincipal  # noqa: E402
from doc_registry.core.database import build_engine, get_db, reset_db_state  # noqa: E402
from doc_registry.core.security import create_access_token  # noqa: E402
from doc_registry.models.enums import UserRole  # noqa: E402
from doc_registry.models.orm import Base  # noqa: E402
from doc_registry.services.registry import DocumentRegistryService  # noqa: E402


# ==================== SESSION FIXTURES ====================


@pytest.fixture(scope="session", autouse=True)
def setup_test_environment():
    """Reset global database state around the test session."""
    reset_db_state()
    yield
    reset_db_state()


# ==================== DATABASE FIXTURES ====================


def sqlite_url(path: Path) -> str:
    return f"sqlite+aiosqlite:///{path}"


@pytest_asyncio.fixture
async def async_engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """Create an engine on a fresh SQLite file with all tables created.

    A file (not :memory:) so that separate connections share one database,
    which the concurrency tests rely on.
    """
    engine = build_engine(sqlite_url(tmp_path / "registry.db"))
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(async_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create async session factory."""
    return async_sessionmaker(
        async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Provide a database session for each test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def registry(db_session: AsyncSession) -> DocumentRegistryService:
    """Registry service bound to the test session."""
    return DocumentRegistryService(db_session)


# ==================== AUTH FIXTURES ====================


@pytest.fixture
def alice() -> UserPrincipal:
    return UserPrincipal(username="alice", name="Alice")


@pytest.fixture
def bob() -> UserPrincipal:
    return UserPrincipal(username="bob", name="Bob")


@pytest.fixture
def carol() -> UserPrincipal:
    return UserPrincipal(username="carol", name="Carol")


@pytest.fixture
def admin() -> UserPrincipal:
    return UserPrincipal(username="admin", name="Admin", role=UserRole.ADMIN)


@pytest.fixture
def auth_headers() -> Callable[..., dict[str, str]]:
    """Build Authorization headers carrying a signed access token."""

    def _headers(username: str, role: str | None = None) -> dict[str, str]:
        claims = {"sub": username}
        if role:
            claims["role"] = role
        return {"Authorization": f"Bearer {create_access_token(claims)}"}

    return _headers


# ==================== HTTP FIXTURES ====================


@pytest_asyncio.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client whose requests run against the test database."""
    from doc_registry.main import app

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    # Clean up
    app.dependency_overrides.clear()


# ==================== MARKERS ====================


def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, no database)")
    config.addinivalue_line("markers", "integration: Integration tests (real database)")
