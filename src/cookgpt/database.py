"""Database configuration and session management."""

import os
from collections.abc import AsyncIterator

from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

DATABASE_URL = os.getenv("DATABASE_URL", "postgresql+asyncpg://localhost/cookgpt")
_SQL_ECHO = os.getenv("SQL_ECHO", "").lower() in ("1", "true", "yes")


class Base(DeclarativeBase):
    """Base class for all database models."""

    pass


def sync_database_url(url: str) -> str:
    """Strip the async driver from a database URL for sync engines."""
    return url.replace("+asyncpg", "").replace("+aiosqlite", "")


# Async engine for FastAPI endpoints
async_engine = create_async_engine(DATABASE_URL, echo=_SQL_ECHO)
AsyncSessionLocal = async_sessionmaker(
    async_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


# Sync engine for scripts and test setup
sync_engine = create_engine(sync_database_url(DATABASE_URL), echo=_SQL_ECHO)


async def get_db() -> AsyncIterator[AsyncSession]:
    """Dependency for FastAPI endpoints."""
    async with AsyncSessionLocal() as session:
        yield session
