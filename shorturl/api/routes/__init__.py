"""Routes package initialization.

This module exports the route collection for the application.
"""

from fastapi import APIRouter

from shorturl.api.routes import shortener, redirect

# Create root router
api_router = APIRouter()

# Management routes live at the root: POST /, GET /, DELETE /{url_id}
api_router.include_router(shortener.router)

# Short URLs resolve directly at /{url_id}
api_router.include_router(redirect.router)

__all__ = ["api_router"]
