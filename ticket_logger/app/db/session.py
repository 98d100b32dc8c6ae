"""
Database session configuration.

This module handles database engine creation and session management
using SQLAlchemy with async support. The engine is owned by a `Database`
handle which the application creates at startup and disposes at shutdown.
"""

import logging
from typing import AsyncIterator, Optional

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

logger = logging.getLogger("ticket_logger.db")

# Create declarative base for models
Base = declarative_base()


class Database:
    """Explicitly acquired handle over the async engine and its session factory."""

    def __init__(
        self,
        url: str,
        echo: bool = False,
        pool_size: Optional[int] = None,
        max_overflow: Optional[int] = None,
        engine: Optional[AsyncEngine] = None,
    ):
        if engine is None:
            engine_kwargs = {"echo": echo, "future": True}
            # SQLite pools do not accept sizing arguments
            if not url.startswith("sqlite") and pool_size is not None:
                engine_kwargs["pool_size"] = pool_size
                engine_kwargs["max_overflow"] = max_overflow or 0
            engine = create_async_engine(url, **engine_kwargs)
        self.engine = engine
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    async def create_tables(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def ping(self) -> bool:
        """Run a trivial query; return False instead of raising when unreachable."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception as exc:
            logger.error("Failed to connect to the database: %s", exc)
            return False

    async def dispose(self) -> None:
        """Close every pooled connection."""
        await self.engine.dispose()
        logger.info("Database connections closed")


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """
    FastAPI dependency for database sessions.

    Yields an async session from the application's `Database` handle
    and ensures it's properly closed.
    """
    database: Database = request.app.state.database
    async with database.session_factory() as session:
        try:
            yield session
        finally:
            await session.close()
