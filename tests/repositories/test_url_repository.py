"""Tests for the URL repository."""

import uuid
from datetime import timedelta

import pytest
from sqlalchemy import select

from shorturl.models.url import ShortURL, ShortURLCreate, utcnow
from shorturl.repositories.url_repository import URLRepository, DuplicateEntityError
from tests.utils import create_test_url, random_url


@pytest.mark.repository
class TestURLRepository:
    """Test suite for URL repository."""

    @pytest.fixture
    def url_repository(self):
        """Return URL repository instance."""
        return URLRepository()

    @pytest.mark.asyncio
    async def test_create_short_url(self, test_db, url_repository):
        """Test URL creation."""
        url_id = uuid.uuid4()
        test_url = random_url()

        url_data = ShortURLCreate(
            id=url_id,
            original_url=test_url,
            short_url=f"http://short.test/{url_id}",
        )

        url = await url_repository.create_short_url(db=test_db, data=url_data)
        await test_db.commit()

        assert url.id == url_id
        assert url.original_url == test_url
        assert url.expires_at is None

        db_url = await url_repository.get_by_id(test_db, url_id)
        assert db_url is not None
        assert db_url.original_url == test_url
        assert db_url.short_url == f"http://short.test/{url_id}"

    @pytest.mark.asyncio
    async def test_create_with_expiration(self, test_db, url_repository):
        expires_at = utcnow() + timedelta(days=3)
        url_id = uuid.uuid4()

        await url_repository.create_short_url(
            test_db,
            {
                "id": url_id,
                "original_url": random_url(),
                "short_url": f"http://short.test/{url_id}",
                "expires_at": expires_at,
            },
        )
        await test_db.commit()

        db_url = await url_repository.get_by_id(test_db, url_id)
        assert db_url.expires_at == expires_at

    @pytest.mark.asyncio
    async def test_create_duplicate_id(self, test_db, url_repository):
        """Test duplicate id handling."""
        existing = await create_test_url(test_db)

        with pytest.raises(DuplicateEntityError) as excinfo:
            await url_repository.create_short_url(
                db=test_db,
                data=ShortURLCreate(
                    id=existing.id,
                    original_url=random_url(),
                    short_url=f"http://short.test/{existing.id}",
                )
            )

        assert str(existing.id) in str(excinfo.value)

    @pytest.mark.asyncio
    async def test_get_by_id_nonexistent(self, test_db, url_repository):
        """Test retrieving nonexistent URL."""
        assert await url_repository.get_by_id(test_db, uuid.uuid4()) is None

    @pytest.mark.asyncio
    async def test_get_all_includes_expired(self, test_db, url_repository):
        live = await create_test_url(test_db)
        expired = await create_test_url(test_db, expires_at=utcnow() - timedelta(days=1))

        urls = await url_repository.get_all(test_db)

        assert {url.id for url in urls} == {live.id, expired.id}

    @pytest.mark.asyncio
    async def test_get_all_empty(self, test_db, url_repository):
        assert await url_repository.get_all(test_db) == []

    @pytest.mark.asyncio
    async def test_delete_by_id(self, test_db, url_repository):
        url = await create_test_url(test_db)
        other = await create_test_url(test_db)

        assert await url_repository.delete_by_id(test_db, url.id) == 1
        await test_db.commit()

        assert await url_repository.get_by_id(test_db, url.id) is None
        assert await url_repository.get_by_id(test_db, other.id) is not None

        # A second delete finds nothing
        assert await url_repository.delete_by_id(test_db, url.id) == 0

    @pytest.mark.asyncio
    async def test_delete_expired_before(self, test_db, url_repository):
        """Test deletion of expired URLs."""
        now = utcnow()
        never = await create_test_url(test_db)
        future = await create_test_url(test_db, expires_at=now + timedelta(days=1))
        await create_test_url(test_db, expires_at=now - timedelta(days=1))
        await create_test_url(test_db, expires_at=now - timedelta(days=2))

        deleted_count = await url_repository.delete_expired_before(test_db, now)
        await test_db.commit()

        assert deleted_count == 2

        result = await test_db.execute(select(ShortURL))
        remaining_ids = {url.id for url in result.scalars().all()}
        assert remaining_ids == {never.id, future.id}

    @pytest.mark.asyncio
    async def test_delete_expired_before_is_idempotent(self, test_db, url_repository):
        now = utcnow()
        await create_test_url(test_db, expires_at=now - timedelta(hours=1))

        assert await url_repository.delete_expired_before(test_db, now) == 1
        await test_db.commit()
        assert await url_repository.delete_expired_before(test_db, now) == 0

    @pytest.mark.asyncio
    async def test_delete_expired_before_is_strict(self, test_db, url_repository):
        """A row expiring exactly at the cut-off survives."""
        cutoff = utcnow().replace(microsecond=0)
        url = await create_test_url(test_db, expires_at=cutoff)

        assert await url_repository.delete_expired_before(test_db, cutoff) == 0
        await test_db.commit()
        assert await url_repository.get_by_id(test_db, url.id) is not None
