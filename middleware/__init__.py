"""
Middleware package for Blip.

This package contains middleware components for request processing
and cross-cutting concerns such as logging and error handling.
"""

from .errors import register_error_handlers, error_response
from .request_logging import RequestLoggingMiddleware

__all__ = [
    "register_error_handlers",
    "error_response",
    "RequestLoggingMiddleware"
]
