"""
Database configuration and session management
Uses SQLAlchemy with async support
"""

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker, AsyncEngine
from sqlalchemy.pool import NullPool
from contextlib import asynccontextmanager
from typing import AsyncGenerator
from fastapi import Request
import logging

from .config import Settings
from storefront.models import Base

logger = logging.getLogger(__name__)

class Database:
    """
    Owns the async engine and session factory
    Constructed once per application and passed to whoever needs it
    """
    
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
                pool_pre_ping=True,
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
        Commits on success and rolls back on any error
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
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created successfully")
    
    async def drop_all(self) -> None:
        """Drop all tables"""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
    
    async def dispose(self) -> None:
        """Close database connections"""
        await self.engine.dispose()
        logger.info("Database connections closed")

# Database dependency
async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    Yield a session from the application's database
    Ensures proper cleanup after use
    """
    database: Database = request.app.state.database
    async with database.session() as session:
        yield session

def get_app_settings(request: Request) -> Settings:
    """Settings the running application was built with"""
    return request.app.state.settings
