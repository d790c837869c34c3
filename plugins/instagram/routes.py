# plugins/instagram/routes.py
"""
Instagram Routes
================

HTTP endpoints for the Instagram plugin:

- GET  /connect/instagram            redirect to Instagram's consent screen
- GET  /connect/instagram/callback   exchange the code, set the token cookie
- GET  /status/instagram             {"connected": bool} from cookie presence
- POST /disconnect/instagram         clear the token cookie
- POST /publish/instagram            create and publish a media container
"""

import logging
from typing import Optional

import httpx
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import RedirectResponse

from config import get_settings
from errors import ConfigurationError, Unauthenticated
from http_client import get_http_client
from models import Platform, PublishRequest, PublishResult
from plugins import RoutePlugin, prepare_publish_request
from plugin_manager import plugin_manager
import token_store

logger = logging.getLogger(__name__)

class InstagramRoutes(RoutePlugin):
    """
    Plugin for Instagram routes.

    Class Attributes:
        service_name (str): The unique identifier for this plugin
    """

    service_name = Platform.INSTAGRAM.value

    def get_router(self) -> APIRouter:
        router = APIRouter(tags=["instagram"])

        def get_oauth_plugin(http_client: httpx.AsyncClient):
            instagram_oauth = plugin_manager.create_authorization_plugin(
                self.service_name, http_client=http_client
            )
            if not instagram_oauth:
                raise ConfigurationError("Instagram OAuth plugin not available")
            return instagram_oauth

        @router.get("/connect/instagram")
        async def instagram_connect(
            request: Request,
            http_client: httpx.AsyncClient = Depends(get_http_client)
        ):
            """Redirect the browser to Instagram's authorization page."""
            instagram_oauth = get_oauth_plugin(http_client)
            redirect_url = await instagram_oauth.get_authorization_url(request.session)
            logger.info("Redirecting to Instagram authorization")
            return RedirectResponse(redirect_url, status_code=302)

        @router.get("/connect/instagram/callback")
        async def instagram_callback(
            request: Request,
            code: Optional[str] = Query(None),
            state: Optional[str] = Query(None),
            error: Optional[str] = Query(None),
            error_description: Optional[str] = Query(None),
            http_client: httpx.AsyncClient = Depends(get_http_client)
        ):
            """Handle Instagram's redirect back after the user grants access."""
            instagram_oauth = get_oauth_plugin(http_client)
            connection = await instagram_oauth.process_callback(
                request.session, code, state, error, error_description
            )

            response = RedirectResponse(get_settings().LANDING_URL, status_code=302)
            token_store.set_token_cookie(
                response, self.service_name, connection.access_token, connection.max_age
            )
            return response

        @router.post("/publish/instagram", response_model=PublishResult)
        async def instagram_publish(
            request: Request,
            body: PublishRequest,
            http_client: httpx.AsyncClient = Depends(get_http_client)
        ):
            """Publish the composed post to Instagram."""
            access_token = token_store.get_token(request, self.service_name)
            if not access_token:
                raise Unauthenticated("Not authenticated with Instagram")

            media_urls = prepare_publish_request(request, body)

            instagram = plugin_manager.create_resource_plugin(self.service_name, http_client=http_client)
            if not instagram:
                raise ConfigurationError("Instagram resource plugin not available")

            data = await instagram.publish(access_token, body.content, media_urls)
            return PublishResult(success=True, data=data)

        self.add_connection_routes(router)
        return router
