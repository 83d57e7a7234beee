"""API request and response schemas.

This module contains Pydantic models for API request validation
and response serialization.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from shorturl.services.exceptions import InvalidExpirationError
from shorturl.services.shortener import is_valid_url, parse_expiration


class URLCreateRequest(BaseModel):
    """Request schema for creating a shortened URL."""
    url: str = Field(..., description="The original URL")
    key: str = Field(..., description="The API key for authorization")
    expiration: Optional[datetime] = Field(
        None, description="The expiration date of the URL (ISO 8601)"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "url": "https://www.example.com",
                "key": "your_api_key_here",
                "expiration": "2024-12-31T23:59:59.000Z"
            }
        }
    )

    @field_validator("url")
    def validate_url(cls, v: str) -> str:
        if not is_valid_url(v):
            raise ValueError("Invalid URL format")
        return v

    @field_validator("expiration", mode="before")
    def require_iso_string(cls, v: Any) -> Any:
        # Only ISO 8601 strings, no epoch numbers in any form
        if v is None:
            return None
        if not isinstance(v, str):
            raise ValueError("Invalid expiration date format")
        try:
            return parse_expiration(v)
        except InvalidExpirationError as e:
            raise ValueError("Invalid expiration date format") from e


class URLCreateResponse(BaseModel):
    """Response schema for a created short URL."""
    short_url: str = Field(..., serialization_alias="shortUrl", description="The shortened URL")


class URLResponse(BaseModel):
    """Response schema for a stored URL record."""
    id: uuid.UUID
    original_url: str
    short_url: str
    expires_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("expires_at")
    def serialize_expires_at(self, value: Optional[datetime]) -> Optional[str]:
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.isoformat()


class MessageResponse(BaseModel):
    """Response schema for plain confirmation messages."""
    message: str


class ErrorResponse(BaseModel):
    """Response schema for errors."""
    detail: str


class ValidationErrorResponse(BaseModel):
    """Response schema for request validation errors."""
    detail: str = "Validation error"
    errors: List[Dict[str, Any]]
