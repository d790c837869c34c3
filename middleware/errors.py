"""
Error Handlers
==============

Renders Blip's error taxonomy as JSON. Every failure the composer sees has
the shape ``{"error": <message>, "details": <optional vendor payload>}``.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from errors import BlipError

logger = logging.getLogger(__name__)


def error_response(status_code: int, message: str, details=None) -> JSONResponse:
    content = {"error": message}
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=jsonable_encoder(content))


async def blip_error_handler(request: Request, exc: BlipError) -> JSONResponse:
    """Turn a BlipError into its JSON error response."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.warning(f"{request.method} {request.url.path} rejected: {exc.message}")
    return error_response(exc.status_code, exc.message, exc.details)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed request bodies as 400s in the same shape as other errors."""
    logger.warning(f"{request.method} {request.url.path} rejected: invalid request body")
    return error_response(400, "Invalid request body", exc.errors())


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Keep unhandled failures in the JSON error shape."""
    logger.exception(f"{request.method} {request.url.path} failed with an unexpected error: {str(exc)}")
    return error_response(500, "Unexpected error")


def register_error_handlers(app: FastAPI) -> None:
    """Install the JSON error handlers on an application."""
    app.add_exception_handler(BlipError, blip_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)
