"""
Database engine and session management for the record store and identity tables.
Handles async database operations with SQLAlchemy and connection pooling.
"""

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool
from sqlalchemy import text
from app.config import Settings
import logging

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Base class for all database models."""

    def __repr__(self) -> str:
        """String representation of the model."""
        return f"<{self.__class__.__name__}>"


def build_engine(settings: Settings) -> AsyncEngine:
    """
    Create the async engine for the configured database URL.

    SQLite (used for tests and local runs) shares a single connection so
    in-memory databases survive across sessions.
    """
    if settings.database_url.startswith("sqlite"):
        return create_async_engine(
            settings.database_url,
            echo=settings.debug,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )

    return create_async_engine(
        settings.database_url,
        echo=settings.debug,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        pool_pre_ping=True,  # Validate connections before use
        pool_recycle=3600,
        pool_timeout=30,
    )


class Database:
    """
    Owns the engine and session factory for one process.
    Built once at startup and passed to the collaborators that need it.
    """

    def __init__(self, settings: Settings, engine: AsyncEngine = None):
        self.settings = settings
        self.engine = engine or build_engine(settings)
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    def session(self) -> AsyncSession:
        """Open a new session; callers use it as an async context manager."""
        return self.session_factory()

    async def create_tables(self):
        """
        Create all database tables.
        This will be used during application startup.
        """
        # Import models so their tables are registered on the metadata
        from app.models import record, identity  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created successfully")

    async def check_connection(self) -> bool:
        """
        Test database connectivity.
        Returns True if connection is successful, False otherwise.
        """
        try:
            async with self.session() as session:
                result = await session.execute(text("SELECT 1"))
                result.scalar()
            logger.info("Database connection successful")
            return True
        except Exception as e:
            logger.error(f"Database connection failed: {e}")
            return False

    async def dispose(self):
        """
        Close database connections.
        This should be called during application shutdown.
        """
        await self.engine.dispose()
        logger.info("Database connections closed")
