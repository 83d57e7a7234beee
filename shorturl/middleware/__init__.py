"""HTTP middleware for the short URL service."""

from shorturl.middleware.logging import RequestLoggingMiddleware

__all__ = ["RequestLoggingMiddleware"]
