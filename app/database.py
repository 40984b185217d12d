"""SQLite storage for the Designetica service.

Two tables live here: the imported Figma component registry and the stored
Figma OAuth token. DATABASE_URL selects the file; tests swap ``engine`` and
``async_session_factory`` for an in-memory database.
"""

from __future__ import annotations

import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator, AsyncIterator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./designetica.db")
SQLITE_BUSY_TIMEOUT_MS = int(os.getenv("SQLITE_BUSY_TIMEOUT_MS", "5000"))


def _build_engine(url: str) -> AsyncEngine:
    built = create_async_engine(
        url,
        echo=os.getenv("DB_ECHO", "false").lower() == "true",
    )

    # WAL lets the registry be read while an import upserts into it
    @event.listens_for(built.sync_engine, "connect")
    def _sqlite_pragmas(dbapi_connection, _record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute(f"PRAGMA busy_timeout={SQLITE_BUSY_TIMEOUT_MS}")
        cursor.close()

    return built


engine: AsyncEngine = _build_engine(DATABASE_URL)
async_session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


class Base(DeclarativeBase):
    pass


@asynccontextmanager
async def _transaction() -> AsyncIterator[AsyncSession]:
    # Looked up at call time so a swapped factory takes effect
    async with async_session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        await session.commit()


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one committed transaction per request."""
    async with _transaction() as session:
        yield session


def get_session_ctx():
    """Same transaction scope as ``get_session``, for code outside a request."""
    return _transaction()


async def init_db() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    await engine.dispose()
