"""
Database configuration and session management
Uses SQLAlchemy with async support
"""

from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool
from contextlib import asynccontextmanager
from typing import AsyncGenerator
from fastapi import Request
import logging

from .config import Settings

logger = logging.getLogger(__name__)


class Database:
    """Owns the async engine and session factory for one application"""

    def __init__(self, settings: Settings):
        url = settings.database_url_async
        self.is_sqlite = url.startswith("sqlite")

        if self.is_sqlite:
            # SQLite doesn't support connection pooling parameters
            self.engine: AsyncEngine = create_async_engine(
                url,
                echo=settings.DATABASE_ECHO,
                poolclass=NullPool,
            )
        else:
            self.engine = create_async_engine(
                url,
                echo=settings.DATABASE_ECHO,
                pool_size=settings.DATABASE_POOL_SIZE,
                max_overflow=settings.DATABASE_MAX_OVERFLOW,
                pool_timeout=settings.DATABASE_POOL_TIMEOUT,
                pool_pre_ping=True,  # Verify connections before use
            )

        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Context manager for database sessions
        Useful for scripts and startup tasks
        """
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def create_all(self) -> None:
        """Initialize database tables"""
        from rewardbin.models import Base

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created successfully")

    async def dispose(self) -> None:
        """Close database connections"""
        await self.engine.dispose()
        logger.info("Database connections closed")


# Database dependency
async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    Create and yield database session
    Ensures proper cleanup after use
    """
    database: Database = request.app.state.database
    async with database.session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
