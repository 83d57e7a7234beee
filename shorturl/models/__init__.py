"""
Data models for the short URL service.

This module imports and exports all SQLModel models used in the application.
"""

from shorturl.models.url import ShortURL, ShortURLBase, ShortURLCreate

__all__ = [
    "ShortURL",
    "ShortURLBase",
    "ShortURLCreate",
]
