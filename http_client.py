"""
HTTP client dependency.

Routes receive a request-scoped ``httpx.AsyncClient`` through FastAPI's
dependency injection, the same way database sessions are handed out with a
yield dependency. Tests swap it for a client backed by
``httpx.MockTransport`` via ``app.dependency_overrides``.
"""

from typing import AsyncGenerator

import httpx


async def get_http_client() -> AsyncGenerator[httpx.AsyncClient, None]:
    """Yield an AsyncClient that is closed once the request finishes."""
    async with httpx.AsyncClient(follow_redirects=True) as client:
        yield client
