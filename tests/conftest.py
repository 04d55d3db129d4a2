"""Pytest configuration and fixtures for find_cache.

Process-wide settings and registry are cleared around every test. DB fixtures
use in-memory SQLite through aiosqlite (StaticPool, so every session of one
engine sees the same database).
"""

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from find_cache.core.config import Settings, get_settings
from find_cache.infrastructure.cache.memory_cache import MemoryCacheStore
from find_cache.infrastructure.cache.registry import CacheRegistry, get_cache_registry
from find_cache.infrastructure.persistence.database import (
    Base,
    create_engine_from_settings,
    create_session_factory,
)
from tests import models  # noqa: F401  (registers test tables on Base.metadata)


@pytest.fixture(autouse=True)
def _reset_process_state():
    """Drop cached Settings and the process-wide registry before and after each test."""
    get_settings.cache_clear()
    get_cache_registry.cache_clear()
    yield
    get_settings.cache_clear()
    get_cache_registry.cache_clear()


@pytest.fixture
def registry() -> CacheRegistry:
    """Fresh registry whose default store is a process-local MemoryCacheStore."""
    return CacheRegistry(default_store_factory=MemoryCacheStore)


@pytest.fixture
async def engine() -> AsyncEngine:
    """In-memory SQLite engine with all test tables created."""
    engine = create_engine_from_settings(Settings(database_url="sqlite+aiosqlite://"))
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_session_factory(engine)


@pytest.fixture
async def db_session(session_factory) -> AsyncSession:
    """Database session for repository/integration tests. Rolls back after test."""
    async with session_factory() as session:
        yield session
        await session.rollback()
