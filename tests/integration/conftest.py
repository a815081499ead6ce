"""Pytest fixtures for storage integration tests."""
import pytest
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool
from plantcare.core.database import Base, enable_sqlite_foreign_keys
from plantcare import models  # noqa: F401  (registers tables on Base.metadata)
import logging

logger = logging.getLogger(__name__)


@pytest.fixture(scope="function")
async def test_engine():
    """
    Fresh in-memory SQLite database per test.

    StaticPool keeps a single connection so every session sees the same
    in-memory database.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False}
    )
    enable_sqlite_foreign_keys(engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.debug("Test schema created")
    yield engine

    await engine.dispose()


@pytest.fixture(scope="function")
def session_factory(test_engine):
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False
    )


@pytest.fixture(scope="function")
async def test_db(session_factory):
    """Database session for one test."""
    async with session_factory() as session:
        yield session
