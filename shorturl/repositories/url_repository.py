"""URL Repository for the short URL service.

This module provides the URLRepository class for database operations related to ShortURL models.
Following the Repository pattern, it abstracts database interactions for URL shortening operations.
"""

import uuid
from datetime import datetime
from typing import Any, Dict, Union

from sqlalchemy.ext.asyncio import AsyncSession

from shorturl.models.url import ShortURL, ShortURLCreate
from shorturl.repositories.base import BaseRepository, DuplicateEntityError


class URLRepository(BaseRepository[ShortURL, ShortURLCreate]):
    """
    Repository for ShortURL model database operations.

    Exposes exactly what the service layer needs: insert, lookup by id,
    full listing, delete by id and the range delete used by the sweep.
    """

    def __init__(self):
        """Initialize the repository with the ShortURL model type."""
        super().__init__(ShortURL)

    async def create_short_url(
        self,
        db: AsyncSession,
        data: Union[ShortURLCreate, Dict[str, Any]]
    ) -> ShortURL:
        """
        Create a new shortened URL entry.

        Args:
            db: Database session
            data: Short URL data (either as a ShortURLCreate model or dictionary)

        Returns:
            The created ShortURL entity

        Raises:
            DuplicateEntityError: If the id already exists
            RepositoryError: On other database errors
        """
        url_id = data.id if isinstance(data, ShortURLCreate) else data.get("id")

        if url_id is not None and await self.get_by_id(db, url_id) is not None:
            raise DuplicateEntityError(self.model_type, "id", url_id)

        return await self.create(db, data)

    async def delete_by_id(self, db: AsyncSession, url_id: uuid.UUID) -> int:
        """
        Delete a URL by id.

        Returns:
            Number of deleted rows, 0 or 1

        Raises:
            RepositoryError: On database errors
        """
        return await self.bulk_delete(db, self.model_type.id == url_id)

    async def delete_expired_before(self, db: AsyncSession, now: datetime) -> int:
        """
        Delete every URL whose expiration is set and strictly earlier than ``now``.

        Args:
            db: Database session
            now: Cut-off as naive UTC

        Returns:
            Number of deleted URLs

        Raises:
            RepositoryError: On database errors
        """
        return await self.bulk_delete(
            db,
            self.model_type.expires_at.isnot(None),
            self.model_type.expires_at < now,
        )
