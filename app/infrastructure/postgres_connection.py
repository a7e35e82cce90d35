# app/infrastructure/postgres_connection.py

import logging
from datetime import datetime, UTC
from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from sqlalchemy import text
from config.settings import settings

logger = logging.getLogger(__name__)


# Base class for SQLAlchemy models
Base = declarative_base()


class PostgresConnection:
    """Simple PostgreSQL connection manager using SQLAlchemy"""

    def __init__(self):
        self.engine: AsyncEngine | None = None
        self.session_factory: async_sessionmaker[AsyncSession] | None = None

    async def connect(self):
        """Connect to PostgreSQL"""
        if self.engine is not None:
            return  # Already connected

        try:
            self.engine = create_async_engine(
                settings.DATABASE_URL,
                echo=settings.DEBUG,  # Log SQL queries in debug mode
                pool_pre_ping=True,  # Verify connections before using them
                pool_size=10,
                max_overflow=20,
            )

            self.session_factory = async_sessionmaker(
                self.engine,
                class_=AsyncSession,
                expire_on_commit=False,
            )
            # Test connection
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))

            logger.info(
                f"Connected to PostgreSQL at {settings.POSTGRES_HOST}:{settings.POSTGRES_PORT}/{settings.POSTGRES_DB}"
            )
        except Exception as e:
            logger.error(f"Failed to connect to PostgreSQL: {e}")
            self.engine = None
            self.session_factory = None
            raise

    async def disconnect(self):
        """Disconnect from PostgreSQL"""
        if self.engine:
            await self.engine.dispose()
            self.engine = None
            self.session_factory = None
            logger.info("Disconnected from PostgreSQL")

    def get_session_factory(self) -> async_sessionmaker[AsyncSession]:
        """Get the session factory for creating database sessions"""
        if not self.session_factory:
            raise RuntimeError("PostgreSQL session factory is not initialized. Call connect() first.")
        return self.session_factory


# Shared instance
postgres_connection = PostgresConnection()


async def get_db_session() -> AsyncSession:
    """
    Dependency for FastAPI routes to get a database session.

    One session per request; every service mutation commits its own
    transaction, anything left open is rolled back on error.
    """
    session_factory = postgres_connection.get_session_factory()
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


def utcnow() -> datetime:
    """Naive UTC timestamp, the format every DateTime column stores"""
    return datetime.now(UTC).replace(tzinfo=None)
