"""
Custom Exceptions

This module defines custom exceptions for better error handling
and more specific error messages.

Request-level errors (invalid URL, unknown short code, malformed payload)
are reported to the caller and never mutate the link store. Snapshot errors
are degraded-mode conditions: the service keeps serving from memory.
"""


class URLShortenerException(Exception):
    """Base exception for URL shortener service."""
    pass


class InvalidURLError(URLShortenerException):
    """Raised when URL validation fails."""

    def __init__(self, url: str, reason: str = "Invalid URL format"):
        self.url = url
        self.reason = reason
        super().__init__(f"{reason}: {url}")


class ShortCodeNotFoundError(URLShortenerException):
    """Raised when a short code has no mapping in the link store."""

    def __init__(self, short_code: str):
        self.short_code = short_code
        super().__init__(f"Short code '{short_code}' not found")


class InvalidPayloadError(URLShortenerException):
    """Raised when a request body is not a valid shorten request."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Invalid request body: {reason}")


class UnsupportedMediaTypeError(URLShortenerException):
    """Raised when a request body is not declared as JSON."""

    def __init__(self, content_type: str):
        self.content_type = content_type
        super().__init__(
            f"Unsupported content type '{content_type}', expected application/json"
        )


class PayloadTooLargeError(URLShortenerException):
    """Raised when a request body exceeds the configured size limit."""

    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(f"Request body exceeds {limit} bytes")


class SnapshotError(URLShortenerException):
    """Base class for snapshot file failures."""

    def __init__(self, location: str, message: str, original_error: Exception = None):
        self.location = location
        self.original_error = original_error
        super().__init__(f"{message}: {location}")


class SnapshotReadError(SnapshotError):
    """Raised when the snapshot is missing, unreadable or not a valid snapshot."""


class SnapshotWriteError(SnapshotError):
    """Raised when the snapshot cannot be written."""
