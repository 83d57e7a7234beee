"""Service layer for the short URL service.

This package contains service classes implementing the business logic of the application.
Services orchestrate interactions between repositories and provide domain-specific operations.
"""

from shorturl.services.shortener import ShortenedURLService
from shorturl.services.cleanup import CleanupService

__all__ = ["ShortenedURLService", "CleanupService"]
