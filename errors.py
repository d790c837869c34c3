"""
Exception classes for Blip.

Every error a route can surface derives from BlipError, which carries the
HTTP status it maps to plus an optional ``details`` payload (usually the
vendor's raw error body). The handlers in ``middleware.errors`` render
these as ``{"error": ..., "details": ...}`` JSON responses.
"""

from typing import Any, Optional


class BlipError(Exception):
    """Base exception for all Blip errors."""

    status_code = 500

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ConfigurationError(BlipError):
    """Raised when required client credentials are missing from the environment."""

    status_code = 500


class InvalidRequest(BlipError):
    """Raised when a request is missing parameters or carries an invalid OAuth state."""

    status_code = 400


class Unauthenticated(BlipError):
    """Raised when no usable platform token accompanies the request."""

    status_code = 401


class UpstreamError(BlipError):
    """Raised when a platform API returns a non-2xx or malformed response."""

    status_code = 500
