"""
Landing Route
=============

``GET /`` is where OAuth callbacks send the browser back to. It reports the
platforms Blip can publish to and which of them the browser has connected.
"""

import logging

from fastapi import APIRouter, Request

from config import get_settings
from models import HomeResponse, PlatformSummary
from plugin_manager import plugin_manager
import token_store

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Home"])

@router.get("/", response_model=HomeResponse)
async def home(request: Request):
    """List the supported platforms with their connection state."""
    platforms = [
        PlatformSummary(name=name, connected=token_store.has_token(request, name))
        for name in plugin_manager.get_platforms()
    ]
    return HomeResponse(app=get_settings().APP_NAME, platforms=platforms)
