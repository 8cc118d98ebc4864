"""Async database engine and sessions.

Story deletion relies on ``ON DELETE CASCADE`` for collaborators and
comments, so every engine built here enforces foreign keys, including
SQLite engines used in development and tests.
"""

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None

# Queue-pool options SQLite's pools do not accept
_POOL_OPTIONS = ("pool_size", "max_overflow")


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(database_url: str, **engine_kwargs: Any) -> AsyncEngine:
    """Create an async engine with foreign keys enforced.

    Args:
        database_url: Async connection URL (postgresql+asyncpg://... or
            sqlite+aiosqlite://...)
        **engine_kwargs: Additional arguments passed to create_async_engine
    """
    engine_kwargs.setdefault("echo", False)
    engine_kwargs.setdefault("pool_pre_ping", True)

    is_sqlite = make_url(database_url).get_backend_name() == "sqlite"
    if is_sqlite:
        for option in _POOL_OPTIONS:
            engine_kwargs.pop(option, None)

    engine = create_async_engine(database_url, **engine_kwargs)
    if is_sqlite:
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


def init_db(database_url: str, **engine_kwargs: Any) -> None:
    """Initialize the application's engine and session factory."""
    global _engine, _session_factory

    _engine = build_engine(database_url, **engine_kwargs)
    _session_factory = build_session_factory(_engine)


def get_engine() -> AsyncEngine:
    """Get the database engine.

    Raises:
        RuntimeError: If database not initialized.
    """
    if _engine is None:
        raise RuntimeError("Database not initialized. Call init_db first.")
    return _engine


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield a request-scoped session.

    Commits when the request handler returns, rolls back if it raises.

    Raises:
        RuntimeError: If database not initialized.
    """
    if _session_factory is None:
        raise RuntimeError("Database not initialized. Call init_db first.")
    async with _session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def close_db() -> None:
    """Dispose of the engine on shutdown."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _session_factory = None
