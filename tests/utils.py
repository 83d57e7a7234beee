"""Test utilities for short URL service tests."""

import random
import string
import uuid
from datetime import datetime
from typing import Optional

from shorturl.models.url import ShortURL

PUBLIC_URL = "http://short.test"


def random_string(length: int = 10) -> str:
    """Generate a random alphanumeric string."""
    return ''.join(random.choice(string.ascii_letters + string.digits) for _ in range(length))


def random_url() -> str:
    """Generate a random URL for testing."""
    domain = f"{random_string(8).lower()}.com"
    path = random_string(12)
    return f"https://{domain}/{path}"


async def create_test_url(
    db,
    original_url: Optional[str] = None,
    expires_at: Optional[datetime] = None,
    url_id: Optional[uuid.UUID] = None,
) -> ShortURL:
    """Create and commit a test ShortURL in the database."""
    url_id = url_id or uuid.uuid4()
    url = ShortURL(
        id=url_id,
        original_url=original_url or random_url(),
        short_url=f"{PUBLIC_URL}/{url_id}",
        expires_at=expires_at,
    )
    db.add(url)
    await db.commit()
    return url
