# plugins/instagram/auth.py
"""
Instagram OAuth Authorization Plugin
====================================

Connects an Instagram account through the Instagram authorization-code flow.

Flow:
  1. GET  https://www.instagram.com/oauth/authorize              (browser)
  2. POST {graph}/oauth/access_token                              short-lived token
  3. GET  {graph}/access_token?grant_type=ig_refresh_token        long-lived token, best-effort
  4. GET  {graph}/me?fields=id,username,name                      best-effort, logging only

Unlike Twitter, the token exchange sends the app secret in the form body and
uses no Authorization header, and there is no PKCE.
"""

import logging
from typing import Any, Dict, MutableMapping, Optional
from urllib.parse import urlencode

import httpx

from errors import ConfigurationError, UpstreamError
from models import Platform, PlatformConnection
from plugins import AuthorizationPlugin
from plugins.instagram.config import get_instagram_settings

logger = logging.getLogger(__name__)

AUTHORIZE_URL = "https://www.instagram.com/oauth/authorize"

class InstagramOAuthAuthorizationPlugin(AuthorizationPlugin):
    """
    Plugin for Instagram OAuth authorization.

    Class Attributes:
        service_name (str): The unique identifier for this plugin
    """

    service_name = Platform.INSTAGRAM.value

    async def get_authorization_url(self, session: MutableMapping[str, Any]) -> str:
        """
        Generate an Instagram authorization URL.

        Raises:
            ConfigurationError: If INSTAGRAM_APP_ID or INSTAGRAM_REDIRECT_URI is missing
        """
        settings = get_instagram_settings()
        if not settings.APP_ID or not settings.REDIRECT_URI:
            raise ConfigurationError("Missing INSTAGRAM_APP_ID or INSTAGRAM_REDIRECT_URI in env")

        params = {
            "client_id": settings.APP_ID,
            "redirect_uri": settings.REDIRECT_URI,
            "scope": settings.SCOPES,
            "response_type": "code",
            "state": self.issue_state(session),
        }
        return f"{AUTHORIZE_URL}?{urlencode(params)}"

    async def process_callback(
        self,
        session: MutableMapping[str, Any],
        code: Optional[str],
        state: Optional[str],
        error: Optional[str] = None,
        error_description: Optional[str] = None
    ) -> PlatformConnection:
        """
        Process the Instagram callback.

        Exchanges the code for a short-lived token, then tries to upgrade it to
        a long-lived one. The upgrade and the profile lookup never fail the flow.

        Raises:
            InvalidRequest: If the code or state is missing or invalid
            ConfigurationError: If app credentials are missing
            UpstreamError: If the token exchange fails
        """
        code = self.verify_callback(session, code, state, error, error_description)

        settings = get_instagram_settings()
        if not settings.APP_ID or not settings.APP_SECRET or not settings.REDIRECT_URI:
            raise ConfigurationError("Missing Instagram environment variables")

        token_data = await self.exchange_code(code)
        access_token = await self.upgrade_token(token_data["access_token"])

        user_info = await self.get_user_info(access_token)
        username = user_info.get("username") or user_info.get("name") or ""
        logger.info(f"Instagram user connected: @{username} ({user_info.get('id', '')})")

        return PlatformConnection(
            platform=Platform.INSTAGRAM,
            access_token=access_token,
            max_age=settings.TOKEN_MAX_AGE,
            account_id=user_info.get("id"),
            username=username or None
        )

    async def exchange_code(self, code: str) -> Dict[str, Any]:
        """
        Exchange an authorization code for a short-lived access token.

        Raises:
            UpstreamError: If Instagram rejects the exchange or omits access_token
        """
        settings = get_instagram_settings()
        data = {
            "client_id": settings.APP_ID,
            "client_secret": settings.APP_SECRET,
            "grant_type": "authorization_code",
            "redirect_uri": settings.REDIRECT_URI,
            "code": code,
        }

        try:
            response = await self.http_client.post(f"{settings.graph_base_url}/oauth/access_token", data=data)
        except httpx.HTTPError as e:
            logger.error(f"Instagram token request failed: {str(e)}")
            raise UpstreamError("Unexpected error during token exchange", str(e))

        if response.is_error:
            logger.error(f"Instagram token error: {response.text}")
            raise UpstreamError("Failed to exchange token with Instagram", response.text)

        try:
            token_data = response.json()
        except ValueError:
            raise UpstreamError("Failed to exchange token with Instagram", response.text)

        if not isinstance(token_data, dict) or not token_data.get("access_token"):
            raise UpstreamError("No access_token in Instagram response", token_data)

        return token_data

    async def upgrade_token(self, short_lived_token: str) -> str:
        """
        Swap a short-lived token for a long-lived (60 day) one.

        Returns the short-lived token unchanged if the upgrade fails for any reason.
        """
        settings = get_instagram_settings()
        params = {
            "grant_type": "ig_refresh_token",
            "access_token": short_lived_token,
            "client_secret": settings.APP_SECRET,
        }

        try:
            response = await self.http_client.get(f"{settings.graph_base_url}/access_token", params=params)
            if response.is_success:
                long_lived_token = response.json().get("access_token")
                if long_lived_token:
                    logger.info("Got long-lived Instagram token")
                    return long_lived_token
            logger.warning(f"Instagram long-lived token upgrade failed ({response.status_code}), keeping short-lived token")
        except (httpx.HTTPError, ValueError, AttributeError) as e:
            logger.warning(f"Instagram long-lived token upgrade failed, keeping short-lived token: {str(e)}")

        return short_lived_token

    async def get_user_info(self, access_token: str) -> Dict[str, Any]:
        """
        Get the connected Instagram user's id and username.

        Failures are logged and an empty dict is returned.
        """
        settings = get_instagram_settings()
        try:
            response = await self.http_client.get(
                f"{settings.graph_base_url}/me",
                params={"fields": "id,username,name", "access_token": access_token}
            )
            if response.is_success:
                payload = response.json()
                if isinstance(payload, dict):
                    return payload
            logger.warning(f"Instagram /me returned {response.status_code}")
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Failed to fetch Instagram user info: {str(e)}")
        return {}
