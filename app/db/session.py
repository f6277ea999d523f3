"""
Async engine, session factory and schema bootstrap.

PostgreSQL (asyncpg) gets a sized, pre-pinged pool from settings; SQLite
(aiosqlite, local runs and tests) keeps SQLAlchemy's own pool.
"""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import (AsyncEngine, AsyncSession,
                                    async_sessionmaker, create_async_engine)

from app.core.config import settings
from app.db.base import Base

logger = logging.getLogger(__name__)


def _engine_options(url: str) -> dict:
    options: dict = {"echo": settings.DB_ECHO}
    if url.startswith("sqlite"):
        options["connect_args"] = {"check_same_thread": False}
    else:
        options.update(
            pool_pre_ping=True,
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_recycle=settings.DB_POOL_RECYCLE,
        )
    return options


engine: AsyncEngine = create_async_engine(
    settings.DATABASE_URL, **_engine_options(settings.DATABASE_URL)
)

# Objects stay readable after commit; background notifications reuse them
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def create_tables(bind: AsyncEngine = engine) -> None:
    """Create missing tables. Every model module must be imported beforehand."""
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables initialised (%d tables)", len(Base.metadata.tables))
