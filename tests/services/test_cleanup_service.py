"""Tests for the expired URL cleanup service."""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest
from sqlalchemy import func, select

from shorturl.models.url import ShortURL, utcnow
from shorturl.repositories.base import RepositoryError
from shorturl.services.cleanup import CleanupService
from shorturl.services.exceptions import CleanupError, ExpiredURLCleanupError
from tests.utils import create_test_url


@pytest.fixture
def cleanup_service(url_repository):
    return CleanupService(url_repository)


async def _count(db) -> int:
    result = await db.execute(select(func.count()).select_from(ShortURL))
    return result.scalar_one()


@pytest.mark.service
class TestCleanupService:

    @pytest.mark.asyncio
    async def test_cleanup_expired_urls(self, test_db, cleanup_service):
        now = utcnow()
        keep_forever = await create_test_url(test_db)
        keep_future = await create_test_url(test_db, expires_at=now + timedelta(hours=1))
        await create_test_url(test_db, expires_at=now - timedelta(minutes=1))
        await create_test_url(test_db, expires_at=datetime(2000, 1, 1))

        result = await cleanup_service.cleanup_expired_urls(test_db)
        await test_db.commit()

        assert result["deleted"] == 2
        assert result["execution_time"] >= 0
        assert "timestamp" in result

        remaining = (await test_db.execute(select(ShortURL))).scalars().all()
        assert {url.id for url in remaining} == {keep_forever.id, keep_future.id}

    @pytest.mark.asyncio
    async def test_cleanup_with_explicit_now(self, test_db, cleanup_service):
        await create_test_url(test_db, expires_at=datetime(2030, 1, 1))

        result = await cleanup_service.cleanup_expired_urls(test_db, now=datetime(2029, 12, 31))
        assert result["deleted"] == 0
        assert result["timestamp"] == "2029-12-31T00:00:00"

        result = await cleanup_service.cleanup_expired_urls(
            test_db, now=datetime(2030, 1, 2, tzinfo=timezone.utc)
        )
        await test_db.commit()
        assert result["deleted"] == 1
        assert await _count(test_db) == 0

    @pytest.mark.asyncio
    async def test_cleanup_is_idempotent(self, test_db, cleanup_service):
        await create_test_url(test_db, expires_at=utcnow() - timedelta(days=1))
        await create_test_url(test_db)

        first = await cleanup_service.cleanup_expired_urls(test_db)
        await test_db.commit()
        second = await cleanup_service.cleanup_expired_urls(test_db)
        await test_db.commit()

        assert first["deleted"] == 1
        assert second["deleted"] == 0
        assert await _count(test_db) == 1

    @pytest.mark.asyncio
    async def test_cleanup_empty_table(self, test_db, cleanup_service):
        result = await cleanup_service.cleanup_expired_urls(test_db)
        assert result["deleted"] == 0

    @pytest.mark.asyncio
    async def test_cleanup_repository_error(self, test_db, cleanup_service, url_repository):
        with patch.object(
            url_repository, "delete_expired_before", side_effect=RepositoryError("disk full")
        ):
            with pytest.raises(ExpiredURLCleanupError) as excinfo:
                await cleanup_service.cleanup_expired_urls(test_db)

        assert isinstance(excinfo.value, CleanupError)
        assert "disk full" in str(excinfo.value)
