"""Database setup with async SQLAlchemy for SQLite/PostgreSQL."""
from sqlalchemy import DateTime, event
from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.types import TypeDecorator
from plantcare.core.config import settings
from datetime import datetime, timezone
import logging
import os
import re
from typing import AsyncGenerator

logger = logging.getLogger(__name__)

# Mask password in database URL for logging
def mask_db_url(url: str) -> str:
    """Mask password in database URL for safe logging."""
    return re.sub(r'://([^:]+):([^@]+)@', r'://\1:****@', url)


def is_sqlite_url(url: str) -> bool:
    return url.startswith("sqlite")


def ensure_sqlite_directory(url: str) -> None:
    """Create the parent directory of a file-based SQLite database."""
    match = re.match(r'sqlite\+\w+:///(.+)', url)
    if not match or match.group(1) == ":memory:":
        return
    directory = os.path.dirname(match.group(1))
    if directory and not os.path.isdir(directory):
        logger.info(f"Creating database directory: {directory}")
        os.makedirs(directory, exist_ok=True)


def build_engine_args(url: str) -> dict:
    """Engine keyword arguments; pool sizing only applies to server databases."""
    engine_args = {
        "echo": settings.log_level == "DEBUG",  # Log all SQL if DEBUG
        "pool_pre_ping": True,  # Verify connections before using
    }
    if not is_sqlite_url(url):
        engine_args.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_timeout=settings.db_pool_timeout,
            pool_recycle=settings.db_pool_recycle,
        )
        logger.info(
            f"Configuring connection pool: pool_size={settings.db_pool_size}, "
            f"max_overflow={settings.db_max_overflow}, pool_timeout={settings.db_pool_timeout}s, "
            f"pool_recycle={settings.db_pool_recycle}s"
        )
    return engine_args


def enable_sqlite_foreign_keys(async_engine: AsyncEngine) -> None:
    """SQLite ignores foreign keys (and ON DELETE CASCADE) unless enabled per connection."""
    if async_engine.dialect.name != "sqlite":
        return

    @event.listens_for(async_engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


logger.info(f"Connecting to database: {mask_db_url(settings.database_url)}")
logger.debug(f"Database URL scheme: {settings.database_url.split(':')[0]}")

if is_sqlite_url(settings.database_url):
    ensure_sqlite_directory(settings.database_url)

# Create async engine
engine = create_async_engine(
    settings.database_url,
    **build_engine_args(settings.database_url)
)
enable_sqlite_foreign_keys(engine)

logger.info("Database engine created")

# Create async session factory
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False
)


class Base(DeclarativeBase):
    """Base class for all database models."""
    pass


class AwareDateTime(TypeDecorator):
    """DateTime stored as UTC that always comes back timezone-aware.

    SQLite has no native timezone support and returns naive values, so
    naive results are treated as UTC.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return value
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def process_result_value(self, value, dialect):
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency for getting database sessions.

    NOTE: This dependency does NOT auto-commit. Services must explicitly
    call await session.commit() when needed.
    """
    logger.debug("Creating new database session")
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception as e:
            await session.rollback()
            logger.error(f"Database session rolled back due to error: {str(e)}", exc_info=True)
            raise
        finally:
            logger.debug("Database session closed")


async def init_db():
    """Create missing tables (alembic remains the migration path for existing databases)."""
    logger.info("Initializing database tables...")

    # Register every model on Base.metadata
    import plantcare.models  # noqa: F401

    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("✓ Database tables initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize database tables: {str(e)}", exc_info=True)
        logger.debug(f"Database URL (masked): {mask_db_url(settings.database_url)}")
        raise
