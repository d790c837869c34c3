# plugins/twitter/routes.py
"""
Twitter Routes
==============

HTTP endpoints for the Twitter plugin:

- GET  /connect/twitter            redirect to Twitter's consent screen
- GET  /connect/twitter/callback   exchange the code, set the token cookie
- GET  /status/twitter             {"connected": bool} from cookie presence
- POST /disconnect/twitter         clear the token cookie
- POST /publish/twitter            post the composed text (and first image)
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

class TwitterRoutes(RoutePlugin):
    """
    Plugin for Twitter routes.

    Class Attributes:
        service_name (str): The unique identifier for this plugin
    """

    service_name = Platform.TWITTER.value

    def get_router(self) -> APIRouter:
        """
        Get the router for Twitter routes.

        Returns:
            APIRouter: FastAPI router with the Twitter endpoints
        """
        router = APIRouter(tags=["twitter"])

        def get_oauth_plugin(http_client: httpx.AsyncClient):
            twitter_oauth = plugin_manager.create_authorization_plugin(
                self.service_name, http_client=http_client
            )
            if not twitter_oauth:
                raise ConfigurationError("Twitter OAuth plugin not available")
            return twitter_oauth

        @router.get("/connect/twitter")
        async def twitter_connect(
            request: Request,
            http_client: httpx.AsyncClient = Depends(get_http_client)
        ):
            """Redirect the browser to Twitter's authorization page."""
            twitter_oauth = get_oauth_plugin(http_client)
            redirect_url = await twitter_oauth.get_authorization_url(request.session)
            logger.info("Redirecting to Twitter authorization")
            return RedirectResponse(redirect_url, status_code=302)

        @router.get("/connect/twitter/callback")
        async def twitter_callback(
            request: Request,
            code: Optional[str] = Query(None),
            state: Optional[str] = Query(None),
            error: Optional[str] = Query(None),
            error_description: Optional[str] = Query(None),
            http_client: httpx.AsyncClient = Depends(get_http_client)
        ):
            """Handle Twitter's redirect back after the user grants access."""
            twitter_oauth = get_oauth_plugin(http_client)
            connection = await twitter_oauth.process_callback(
                request.session, code, state, error, error_description
            )

            response = RedirectResponse(get_settings().LANDING_URL, status_code=302)
            token_store.set_token_cookie(
                response, self.service_name, connection.access_token, connection.max_age
            )
            return response

        @router.post("/publish/twitter", response_model=PublishResult)
        async def twitter_publish(
            request: Request,
            body: PublishRequest,
            http_client: httpx.AsyncClient = Depends(get_http_client)
        ):
            """Post the composed text to Twitter."""
            access_token = token_store.get_token(request, self.service_name)
            if not access_token:
                raise Unauthenticated("Not authenticated with Twitter")

            media_urls = prepare_publish_request(request, body)

            twitter = plugin_manager.create_resource_plugin(self.service_name, http_client=http_client)
            if not twitter:
                raise ConfigurationError("Twitter resource plugin not available")

            data = await twitter.publish(access_token, body.content, media_urls)
            return PublishResult(success=True, data=data)

        self.add_connection_routes(router)
        return router
