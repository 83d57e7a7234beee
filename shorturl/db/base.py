"""Database base configuration for SQLAlchemy with SQLModel.

This module provides base database configuration for async SQLAlchemy with SQLModel.
It includes:
- Engine configuration
- Lazily created, process-wide engine and session factory
- Table creation
"""

from typing import AsyncGenerator, Dict, Optional
import logging
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.engine import make_url
from sqlalchemy.pool import NullPool
from sqlmodel import SQLModel

from shorturl.core.config import Settings, get_settings

logger = logging.getLogger(__name__)

_settings: Optional[Settings] = None
_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker] = None


def get_engine_config(settings: Settings) -> Dict:
    """Get the appropriate engine configuration based on the environment.

    Returns:
        Dict: Engine configuration parameters for the current environment.
    """
    if settings.ENVIRONMENT.value == "testing":
        # Use NullPool for tests to avoid connection issues
        return {"echo": False, "poolclass": NullPool}

    config = {"echo": settings.DB_ECHO, "pool_pre_ping": True}
    if make_url(settings.SQLALCHEMY_DATABASE_URI).get_backend_name() != "sqlite":
        config.update(
            pool_size=settings.POSTGRES_POOL_SIZE,
            max_overflow=settings.POSTGRES_POOL_MAX_OVERFLOW,
            pool_timeout=settings.POSTGRES_POOL_TIMEOUT,
            pool_recycle=settings.POSTGRES_POOL_RECYCLE,
        )
    return config


def configure_engine(settings: Settings) -> None:
    """Select the settings the engine will be built from.

    The engine itself is created on first use. Calling this again
    drops any previously created engine reference.
    """
    global _settings, _engine, _session_factory
    _settings = settings
    _engine = None
    _session_factory = None


def get_engine() -> AsyncEngine:
    """Return the shared async engine, creating it on first use.

    Returns:
        AsyncEngine: Configured SQLAlchemy async engine instance.
    """
    global _engine
    if _engine is None:
        settings = _settings or get_settings()
        engine_url = make_url(settings.SQLALCHEMY_DATABASE_URI)
        logger.info(f"Creating database engine with URL: {engine_url.render_as_string(hide_password=True)}")
        _engine = create_async_engine(
            engine_url,
            future=True,
            **get_engine_config(settings),
        )
    return _engine


def get_session_factory() -> async_sessionmaker:
    """Return the shared async session factory, creating it on first use."""
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(
            bind=get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
    return _session_factory


@asynccontextmanager
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Get async session with proper error handling and cleanup.

    Yields:
        AsyncSession: SQLAlchemy async session
    """
    session = get_session_factory()()
    try:
        yield session
    finally:
        await session.close()


async def init_db() -> None:
    """Create the short URL table if it does not exist yet."""
    # Import models so metadata is populated before table creation.
    from shorturl.models import url  # noqa: F401

    async with get_engine().begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    logger.info("Database tables ready")
