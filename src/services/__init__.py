"""Async database engine and session management for the ledger."""

from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from src.services.config import settings


def to_async_url(database_url: str) -> str:
    """Map a sync SQLAlchemy URL onto its async driver equivalent."""
    if database_url.startswith("sqlite:///"):
        return database_url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
    return database_url


def build_async_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine; SQLite shares a single connection via StaticPool."""
    async_url = to_async_url(database_url)
    if async_url.startswith("sqlite"):
        return create_async_engine(
            async_url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_async_engine(async_url, echo=echo, pool_pre_ping=True)


async_engine = build_async_engine(settings.database_url, settings.database_echo)

AsyncSessionLocal = async_sessionmaker(
    async_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield a session for one request; FastAPI closes it afterwards."""
    async with AsyncSessionLocal() as session:
        yield session


__all__ = [
    "AsyncSessionLocal",
    "async_engine",
    "build_async_engine",
    "get_async_session",
    "to_async_url",
]
