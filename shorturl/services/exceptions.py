"""Exceptions for the short URL service layer.

This module contains the exception hierarchy for the service layer,
providing domain-specific exceptions that abstract underlying implementation details.
"""


class ServiceError(Exception):
    """Base exception for all service-level errors."""
    pass


class URLError(ServiceError):
    """Base exception for URL-related errors."""
    pass


class URLValidationError(URLError):
    """URL input failed validation checks."""
    pass


class InvalidURLError(URLValidationError):
    """The URL format is invalid."""
    pass


class InvalidExpirationError(URLValidationError):
    """The expiration is not a valid ISO 8601 date-time."""
    pass


class URLNotFoundError(URLError):
    """URL with the specified id was not found."""
    pass


class URLExpiredError(URLError):
    """URL has expired and is no longer valid."""
    pass


class URLStorageError(URLError):
    """The underlying storage failed while handling a URL."""
    pass


class AuthorizationError(ServiceError):
    """Base exception for authorization failures."""
    pass


class InvalidAPIKeyError(AuthorizationError):
    """The API key is not in the configured allow-list."""
    pass


class CleanupError(ServiceError):
    """Base exception for cleanup-related errors."""
    pass


class ExpiredURLCleanupError(CleanupError):
    """Error occurred while cleaning up expired URLs."""
    pass
