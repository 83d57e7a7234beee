"""Test fixtures for the short URL service."""

import os

# Required setting, must exist before anything calls get_settings()
os.environ.setdefault("API_KEYS", "test-key-1,test-key-2")

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from shorturl.core.config import Settings
from shorturl.db.session import get_db
from shorturl.main import create_app
from shorturl.repositories.url_repository import URLRepository
from shorturl.services.shortener import ShortenedURLService
# Import models to ensure they're registered with SQLModel metadata
from shorturl.models.url import ShortURL  # noqa: F401


# Test database URL - using SQLite in-memory
TEST_SQLALCHEMY_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

VALID_API_KEY = "test-key-1"
PUBLIC_URL = "http://short.test"


@pytest.fixture
def settings() -> Settings:
    """Settings built explicitly, independent of the process environment."""
    return Settings(
        _env_file=None,
        API_KEYS=f"{VALID_API_KEY},test-key-2",
        PUBLIC_URL=PUBLIC_URL,
        ENVIRONMENT="testing",
        DATABASE_URL=TEST_SQLALCHEMY_DATABASE_URL,
        CLEANUP_ENABLED=False,
        LOG_LEVEL="DEBUG",
    )


@pytest_asyncio.fixture
async def test_engine():
    """Create a fresh in-memory SQLite database for each test."""
    engine = create_async_engine(
        TEST_SQLALCHEMY_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker:
    return async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False
    )


@pytest_asyncio.fixture
async def test_db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Database session for direct repository and service calls."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def session_context(session_factory):
    """Transactional session context, the shape the cleanup job expects."""
    @asynccontextmanager
    async def _session_context():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    return _session_context


@pytest.fixture
def url_repository() -> URLRepository:
    return URLRepository()


@pytest.fixture
def shortener_service(url_repository, settings) -> ShortenedURLService:
    return ShortenedURLService(url_repository=url_repository, settings=settings)


@pytest.fixture
def test_app(settings, session_factory) -> FastAPI:
    """Create FastAPI test app backed by the test database."""
    app = create_app(settings)

    async def _override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db
    return app


@pytest_asyncio.fixture
async def client(test_app) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client talking to the app in-process."""
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac
