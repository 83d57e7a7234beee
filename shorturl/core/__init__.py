"""Core module for the short URL service."""

from shorturl.core.config import Settings, get_settings

__all__ = ["Settings", "get_settings"]
