"""
Global database session and engine management.

This module manages the global AsyncEngine and async_sessionmaker instances
that are used throughout the application for database access.
"""

from __future__ import annotations

from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession

from thinky.core.logging_config import get_logger
from thinky.server.core.config import settings

from .utils import create_all, create_engine, create_sessionmaker

logger = get_logger(__name__)

# A missing DATABASE_URL is reported by the readiness check; a local file
# keeps the engine constructible until then.
FALLBACK_DATABASE_URL = "sqlite+aiosqlite:///./thinky.db"

engine = create_engine(settings.database_url or FALLBACK_DATABASE_URL)
async_session_maker = create_sessionmaker(engine)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency generator for database sessions.

    Yields:
        AsyncSession: An asynchronous SQLAlchemy session.
    """
    async with async_session_maker() as session:
        yield session


async def init_db() -> None:
    """
    Initialize the database.

    Creates any missing tables from the ORM metadata. Deployments run the
    Alembic migrations first, in which case this is a no-op.
    """
    logger.debug("Ensuring database tables exist")
    await create_all(engine)
