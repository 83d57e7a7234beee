"""Basic tests to verify test DB setup."""

import pytest
from sqlalchemy import DateTime, text

from shorturl.models.url import ShortURL


@pytest.mark.asyncio
async def test_table_exists(test_engine):
    """Verify the short URL table exists in the database."""
    async with test_engine.connect() as conn:
        result = await conn.execute(text("SELECT name FROM sqlite_master WHERE type='table'"))
        tables = [row[0] for row in result.fetchall()]

    assert tables == ["short_urls"]


@pytest.mark.asyncio
async def test_table_columns(test_db):
    """Verify the single table has exactly the mapping columns."""
    result = await test_db.execute(text("PRAGMA table_info('short_urls')"))
    columns = {row[1]: row for row in result.fetchall()}

    assert set(columns) == {"id", "original_url", "short_url", "expires_at"}
    # notnull flag
    assert columns["original_url"][3] == 1
    assert columns["short_url"][3] == 1
    assert columns["expires_at"][3] == 0
    # pk flag
    assert columns["id"][5] == 1


def test_expires_at_column_is_naive_datetime():
    """Expiry is stored as naive UTC, whatever type sqlmodel picks by default."""
    column = ShortURL.__table__.c.expires_at

    assert type(column.type) is DateTime
    assert column.type.timezone is False
    assert column.nullable is True
