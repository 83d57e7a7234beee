"""URL shortening service for the short URL service.

This module contains the ShortenedURLService class which implements business logic
for URL shortening, resolution, deletion and listing.
"""

import logging
import re
import uuid
from datetime import datetime
from typing import Callable, List, Optional, Union

from sqlalchemy.ext.asyncio import AsyncSession

from shorturl.core.config import Settings
from shorturl.models.url import ShortURL, ShortURLCreate, to_naive_utc, utcnow
from shorturl.repositories.url_repository import URLRepository
from shorturl.repositories.base import RepositoryError
from shorturl.services.exceptions import (
    InvalidAPIKeyError,
    InvalidExpirationError,
    InvalidURLError,
    URLExpiredError,
    URLNotFoundError,
    URLStorageError,
)
from shorturl.db.session import db_transaction

logger = logging.getLogger(__name__)

_URL_PATTERN = re.compile(
    r'(https?|ftp)://'  # scheme
    r'([a-zA-Z0-9]([a-zA-Z0-9-]*[a-zA-Z0-9])?\.)+[a-zA-Z0-9]([a-zA-Z0-9-]*[a-zA-Z0-9])?'  # domain
    r'(:\d{1,5})?'  # port
    r'([/?#][a-zA-Z0-9._~:/?#[\]@!$&\'()*+,;=%-]*)?'  # path, query, fragment
)


def is_valid_url(url) -> bool:
    """
    Check if a URL is valid.

    Args:
        url: URL to validate

    Returns:
        bool: True if the URL is an absolute http(s) or ftp URL with a dotted host
    """
    if not isinstance(url, str):
        return False
    return bool(_URL_PATTERN.fullmatch(url))


def parse_expiration(value: Union[str, datetime, None]) -> Optional[datetime]:
    """
    Parse an ISO 8601 expiration into naive UTC.

    Raises:
        InvalidExpirationError: If the string is not a valid date-time
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return to_naive_utc(value)
    if not isinstance(value, str) or not value:
        raise InvalidExpirationError(f"Invalid expiration date format: {value!r}")

    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return to_naive_utc(datetime.fromisoformat(text))
    except ValueError as e:
        raise InvalidExpirationError(f"Invalid expiration date format: {value!r}") from e


class ShortenedURLService:
    """
    Service for URL shortening business logic.

    This service handles creation, resolution, deletion and listing of short URLs,
    including expiry evaluation and API key checks.
    """

    def __init__(
        self,
        url_repository: URLRepository,
        settings: Settings,
        clock: Callable[[], datetime] = utcnow,
    ):
        """
        Initialize the URL shortening service.

        Args:
            url_repository: Repository for URL data access
            settings: Loaded application settings (allow-list and public URL)
            clock: Returns the current time as naive UTC
        """
        self.url_repository = url_repository
        self.api_keys = frozenset(settings.API_KEYS)
        self.public_url = settings.PUBLIC_URL
        self.clock = clock

    def is_authorized(self, api_key) -> bool:
        return isinstance(api_key, str) and api_key in self.api_keys

    def build_short_url(self, url_id: uuid.UUID) -> str:
        return f"{self.public_url}/{url_id}"

    @db_transaction(db_param_name="db", error_class=URLStorageError, error_message="Failed to create short URL")
    async def create_short_url(
        self,
        db: AsyncSession,
        original_url: str,
        api_key: str,
        expiration: Union[str, datetime, None] = None
    ) -> str:
        """
        Create a shortened URL with an optional expiration.

        Args:
            db: Database session
            original_url: The original URL to shorten
            api_key: Caller's API key
            expiration: Optional ISO 8601 string or datetime; past values are accepted

        Returns:
            str: The public short URL

        Raises:
            InvalidAPIKeyError: If the key is not in the allow-list
            InvalidURLError: If URL format is invalid
            InvalidExpirationError: If the expiration cannot be parsed
            URLStorageError: If the row cannot be stored
        """
        if not self.is_authorized(api_key):
            raise InvalidAPIKeyError("Invalid API key")

        if not is_valid_url(original_url):
            raise InvalidURLError(f"Invalid URL format: {original_url}")

        expires_at = parse_expiration(expiration)

        url_id = uuid.uuid4()
        url_data = ShortURLCreate(
            id=url_id,
            original_url=original_url,
            short_url=self.build_short_url(url_id),
            expires_at=expires_at,
        )

        try:
            url = await self.url_repository.create_short_url(db, url_data)
        except RepositoryError as e:
            logger.error(f"Error creating short URL: {e}")
            raise URLStorageError("Failed to create short URL") from e

        logger.info(f"Created short URL {url.id} (expires_at={url.expires_at})")
        return url.short_url

    async def resolve(self, db: AsyncSession, url_id: uuid.UUID) -> str:
        """
        Resolve an id to the URL to redirect to.

        Args:
            db: Database session
            url_id: The id to look up

        Returns:
            str: The original URL

        Raises:
            URLNotFoundError: If no URL with this id exists
            URLExpiredError: If the URL exists but has expired
            URLStorageError: If the lookup fails
        """
        try:
            url = await self.url_repository.get_by_id(db, url_id)
        except RepositoryError as e:
            logger.error(f"Error retrieving URL by id: {e}")
            raise URLStorageError("Failed to retrieve URL") from e

        if url is None:
            raise URLNotFoundError(f"URL with id '{url_id}' not found")

        # Expired rows stay in the table until the next sweep
        if url.is_expired(self.clock()):
            raise URLExpiredError(f"URL with id '{url_id}' has expired")

        return url.original_url

    @db_transaction(db_param_name="db", error_class=URLStorageError, error_message="Failed to delete URL")
    async def delete_url(self, db: AsyncSession, url_id: uuid.UUID, api_key: str) -> None:
        """
        Delete a shortened URL by its id.

        Raises:
            InvalidAPIKeyError: If the key is not in the allow-list
            URLNotFoundError: If no URL with this id exists
            URLStorageError: If the delete operation fails
        """
        if not self.is_authorized(api_key):
            raise InvalidAPIKeyError("Invalid API key")

        try:
            deleted = await self.url_repository.delete_by_id(db, url_id)
        except RepositoryError as e:
            logger.error(f"Error deleting URL: {e}")
            raise URLStorageError("Failed to delete URL") from e

        if not deleted:
            raise URLNotFoundError(f"URL with id '{url_id}' not found")

        logger.info(f"Deleted short URL {url_id}")

    async def list_urls(self, db: AsyncSession) -> List[ShortURL]:
        """
        Return every stored URL, including expired rows the sweep has not removed yet.

        Raises:
            URLStorageError: If retrieval fails
        """
        try:
            return await self.url_repository.get_all(db)
        except RepositoryError as e:
            logger.error(f"Error retrieving URLs list: {e}")
            raise URLStorageError("Failed to retrieve URLs") from e
