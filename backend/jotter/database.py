"""
Jotter Backend: Database Engine & Session Management
=====================================================

What:  Async SQLAlchemy engine, session factory and declarative base for the
       table that backs the key-value store.
How:   The engine is built lazily from settings on first use so that importing
       the package never opens a connection pool. Every key-value call opens a
       short session from `get_session_factory()` and commits immediately.
Who:   Used by SqlKeyValueStore, the lifespan handler and Alembic.

Connection Pooling Strategy:
    pool_size / max_overflow / pool_pre_ping come from settings for server
    databases. SQLite URLs use SQLAlchemy's default pool for the dialect and
    ignore the sizing options.
"""

from typing import Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from jotter.config import settings

_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Registers models with a shared metadata object, which Alembic reads for
    migrations and `create_tables()` uses for development databases.
    """
    pass


def build_engine(database_url: str) -> AsyncEngine:
    """
    Create an async engine for `database_url` with the configured pool options.

    Exposed separately from `get_engine()` so tests and scripts can point a
    store at another database without touching the process-wide engine.
    """
    options = {"echo": settings.log_level == "DEBUG"}
    if not database_url.startswith("sqlite"):
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
        )
    return create_async_engine(database_url, **options)


def get_engine() -> AsyncEngine:
    """Return the process-wide engine, creating it from settings on first call."""
    global _engine
    if _engine is None:
        _engine = build_engine(settings.database_url)
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """
    Return the process-wide session factory.

    expire_on_commit=False keeps loaded rows readable after the commit that
    closes each key-value operation.
    """
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(
            get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
        )
    return _session_factory


async def create_tables(engine: Optional[AsyncEngine] = None) -> None:
    """
    Create all registered tables if they do not exist.

    When:  Startup with DB_AUTO_CREATE=true, and in tests. Production schemas
           are managed by Alembic instead.
    """
    # Registers KeyValueEntry with Base.metadata
    from jotter.models import kv_entry  # noqa: F401

    target = engine or get_engine()
    async with target.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def dispose_engine() -> None:
    """
    What:  Gracefully closes all connections in the pool.
    When:  Called during application shutdown (lifespan handler).
    """
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None
