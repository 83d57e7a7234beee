"""Short URL data models.

This module defines the ShortURL model for storing shortened URLs in the database.
"""
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, Index
from sqlmodel import Field, SQLModel


def utcnow() -> datetime:
    """Current time as a naive UTC datetime, the form stored in the database."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    """Normalize a datetime to naive UTC. Naive input is taken to be UTC already."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class ShortURLBase(SQLModel):
    """Base model for short URL data."""

    original_url: str = Field(
        nullable=False,
        description="The original (long) URL to redirect to"
    )
    short_url: str = Field(
        nullable=False,
        description="The public short link, PUBLIC_URL followed by the id"
    )
    expires_at: Optional[datetime] = Field(
        default=None,
        # Stored as naive UTC, see to_naive_utc()
        sa_type=DateTime(timezone=False),
        description="When this short URL expires (null means no expiration)"
    )


class ShortURL(ShortURLBase, table=True):
    """
    Short URL model for storing shortened URLs in the database.

    Rows are written once and never updated. They disappear either through
    an explicit delete or through the daily sweep of expired rows.
    """

    __tablename__ = "short_urls"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)

    __table_args__ = (
        # Used by the expired URL sweep
        Index("ix_short_urls_expires_at", "expires_at"),
    )

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """Check if the short URL has expired.

        Returns:
            bool: True if the URL has expired, False otherwise
        """
        if self.expires_at is None:
            return False
        return self.expires_at < (now or utcnow())


class ShortURLCreate(ShortURLBase):
    """Schema for creating a new short URL."""
    id: uuid.UUID
