"""Cleanup service for the short URL service.

This module contains the CleanupService class which implements the
business logic for removing expired URLs from storage.
"""

import logging
import time
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from shorturl.models.url import to_naive_utc, utcnow
from shorturl.repositories.url_repository import URLRepository
from shorturl.repositories.base import RepositoryError
from shorturl.services.exceptions import ExpiredURLCleanupError

logger = logging.getLogger(__name__)


class CleanupService:
    """
    Service for cleanup operations in the short URL service.
    """

    def __init__(self, url_repository: URLRepository):
        """
        Initialize the cleanup service.

        Args:
            url_repository: Repository for URL data access
        """
        self.url_repository = url_repository

    async def cleanup_expired_urls(
        self,
        db: AsyncSession,
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        """
        Delete every URL whose expiration is earlier than ``now``.

        Args:
            db: Database session
            now: Cut-off time, defaults to the current time

        Returns:
            Dict with statistics about the cleanup operation

        Raises:
            ExpiredURLCleanupError: If cleanup fails
        """
        cutoff = to_naive_utc(now) if now else utcnow()
        started = time.perf_counter()

        try:
            deleted_count = await self.url_repository.delete_expired_before(db, cutoff)
        except RepositoryError as e:
            logger.error(f"Error during expired URL cleanup: {e}")
            raise ExpiredURLCleanupError(f"Failed to cleanup expired URLs: {e}") from e

        execution_time = time.perf_counter() - started
        logger.info(f"Deleted {deleted_count} expired URLs in {execution_time:.2f}s")

        return {
            "deleted": deleted_count,
            "execution_time": execution_time,
            "timestamp": cutoff.isoformat(),
        }
