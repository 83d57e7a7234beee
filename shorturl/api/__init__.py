"""API package for the short URL service.

This package contains the API layer components including routes,
request/response schemas, and dependency providers.
"""

from shorturl.api.routes import api_router

__all__ = ["api_router"]
