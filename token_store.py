"""
Cookie Token Store
==================

Platform access tokens never touch server-side storage. Each connected
platform gets one HTTP-only cookie named ``{platform}_access_token``; the
browser holds the only copy and sends it back with every composer call.

The Set-Cookie header is written by hand rather than through
``Response.set_cookie`` so the attribute order and casing stay exactly
``HttpOnly; Path=/; SameSite=Lax; Max-Age=<seconds>``.
"""

import logging
from typing import Optional

from fastapi import Request, Response

logger = logging.getLogger(__name__)


def cookie_name(platform: str) -> str:
    """Return the cookie name holding the access token for a platform."""
    return f"{platform}_access_token"


def get_token(request: Request, platform: str) -> Optional[str]:
    """Return the platform token sent by the browser, or None if absent or empty."""
    token = request.cookies.get(cookie_name(platform))
    return token or None


def has_token(request: Request, platform: str) -> bool:
    return get_token(request, platform) is not None


def set_token_cookie(response: Response, platform: str, token: str, max_age: int) -> None:
    """Attach the platform token to the response as an HTTP-only cookie."""
    response.headers.append(
        "set-cookie",
        f"{cookie_name(platform)}={token}; HttpOnly; Path=/; SameSite=Lax; Max-Age={int(max_age)}",
    )
    logger.debug(f"Set {cookie_name(platform)} cookie (Max-Age={int(max_age)})")


def clear_token_cookie(response: Response, platform: str) -> None:
    """Expire the platform token cookie in the browser."""
    response.headers.append(
        "set-cookie",
        f"{cookie_name(platform)}=; HttpOnly; Path=/; Max-Age=0; SameSite=Lax",
    )
    logger.debug(f"Cleared {cookie_name(platform)} cookie")
