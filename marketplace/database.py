"""
Database connection and session management.
Handles async database operations with SQLAlchemy and connection pooling.
"""

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy import text, DateTime, Uuid, func
from sqlalchemy.pool import StaticPool
from marketplace.config import settings
from typing import Any, AsyncGenerator, Dict
import logging
import uuid
from datetime import datetime, timezone

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    """Timezone-aware current time, used for row timestamps."""
    return datetime.now(timezone.utc)


def is_memory_database(database_url: str) -> bool:
    # "sqlite+aiosqlite://" with no path is also in-memory
    return ":memory:" in database_url or "mode=memory" in database_url or database_url.rstrip("/").endswith(":")


def engine_options(database_url: str) -> Dict[str, Any]:
    """
    Build engine keyword arguments for the given database URL.

    An in-memory SQLite database exists only inside its connection, so it gets
    a single shared one. File-backed SQLite keeps the dialect's default pool,
    giving each session its own connection and transaction. PostgreSQL gets a
    pooled setup suited to a containerized deployment.
    """
    if database_url.startswith("sqlite"):
        options: Dict[str, Any] = {
            "echo": settings.debug,
            "connect_args": {"check_same_thread": False},
        }
        if is_memory_database(database_url):
            options["poolclass"] = StaticPool
        return options

    return {
        "echo": settings.debug,
        "pool_size": 10,
        "max_overflow": 20,
        "pool_pre_ping": True,
        "pool_recycle": 3600,
        "pool_timeout": 30,
        "connect_args": {
            "server_settings": {
                "application_name": "marketplace_api",
            }
        },
    }


engine = create_async_engine(settings.database_url, **engine_options(settings.database_url))

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """
    Base class for all database models.
    Includes common fields: id, created_at, updated_at.
    """

    # Fetch server-generated timestamps on INSERT/UPDATE
    __mapper_args__ = {"eager_defaults": True}

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        index=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
        index=True
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
        nullable=False
    )

    def __repr__(self) -> str:
        """String representation of the model."""
        return f"<{self.__class__.__name__}(id={self.id})>"


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency to get database session.
    Yields an async database session and ensures it's closed after use.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def test_database_connection() -> bool:
    """
    Test database connectivity.
    Returns True if connection is successful, False otherwise.
    """
    try:
        async with AsyncSessionLocal() as session:
            result = await session.execute(text("SELECT 1"))
            result.scalar()
            logger.info("Database connection successful")
            return True
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        return False


async def create_tables():
    """Create all database tables."""
    # Import models so every table is registered on the metadata
    import marketplace.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created successfully")


async def drop_tables():
    """
    Drop all database tables.
    This should only be used in testing or development.
    """
    if settings.is_production:
        raise RuntimeError("Cannot drop tables in production environment")

    import marketplace.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        logger.info("Database tables dropped successfully")


async def close_db_connection():
    """
    Close database connection.
    This should be called during application shutdown.
    """
    await engine.dispose()
    logger.info("Database connections closed")
