# plugins/twitter/auth.py
"""
Twitter OAuth 2.0 Authorization Plugin
======================================

This module implements the Twitter OAuth 2.0 authorization-code flow with
PKCE for Blip.

Flow:
  1. GET  https://twitter.com/i/oauth2/authorize   (browser, S256 challenge)
  2. POST https://api.twitter.com/2/oauth2/token   (Basic auth, code + verifier)
  3. GET  https://api.twitter.com/2/users/me       (best-effort, logging only)

The state and the PKCE code verifier are generated per connect request and
kept in the signed session cookie until the callback consumes them.
"""

import base64
import hashlib
import logging
import secrets
from typing import Any, Dict, MutableMapping, Optional, Tuple
from urllib.parse import urlencode

import httpx

from errors import ConfigurationError, InvalidRequest, UpstreamError
from models import Platform, PlatformConnection
from plugins import AuthorizationPlugin
from plugins.twitter.config import get_twitter_settings

logger = logging.getLogger(__name__)

AUTHORIZE_URL = "https://twitter.com/i/oauth2/authorize"
TOKEN_URL = "https://api.twitter.com/2/oauth2/token"
USERS_ME_URL = "https://api.twitter.com/2/users/me"

CODE_VERIFIER_KEY = "twitter_code_verifier"


def create_pkce_pair() -> Tuple[str, str]:
    """
    Create a PKCE code verifier and its S256 code challenge.

    Returns:
        Tuple[str, str]: (code_verifier, code_challenge)
    """
    code_verifier = secrets.token_urlsafe(64)
    digest = hashlib.sha256(code_verifier.encode("ascii")).digest()
    code_challenge = base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")
    return code_verifier, code_challenge


class TwitterOAuthAuthorizationPlugin(AuthorizationPlugin):
    """
    Plugin for Twitter OAuth 2.0 authorization.

    Class Attributes:
        service_name (str): The unique identifier for this plugin
    """

    service_name = Platform.TWITTER.value

    async def get_authorization_url(self, session: MutableMapping[str, Any]) -> str:
        """
        Generate a Twitter authorization URL.

        Args:
            session: The request session used to remember state and verifier

        Returns:
            str: The URL of Twitter's consent screen

        Raises:
            ConfigurationError: If TWITTER_CLIENT_ID or TWITTER_REDIRECT_URI is missing
        """
        settings = get_twitter_settings()
        if not settings.CLIENT_ID or not settings.REDIRECT_URI:
            raise ConfigurationError("Missing TWITTER_CLIENT_ID or TWITTER_REDIRECT_URI in env")

        state = self.issue_state(session)
        code_verifier, code_challenge = create_pkce_pair()
        session[CODE_VERIFIER_KEY] = code_verifier

        params = {
            "response_type": "code",
            "client_id": settings.CLIENT_ID,
            "redirect_uri": settings.REDIRECT_URI,
            "scope": settings.SCOPES,
            "state": state,
            "code_challenge": code_challenge,
            "code_challenge_method": "S256",
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
        Process the Twitter callback and exchange the code for an access token.

        Args:
            session: The request session holding the pending state and verifier
            code: The authorization code returned by Twitter
            state: The state returned by Twitter
            error: Error code returned by Twitter, if any
            error_description: Error description returned by Twitter, if any

        Returns:
            PlatformConnection: The connected account's token and cookie lifetime

        Raises:
            InvalidRequest: If the code or state is missing or invalid
            ConfigurationError: If client credentials are missing
            UpstreamError: If the token exchange fails
        """
        code_verifier = session.pop(CODE_VERIFIER_KEY, None)
        code = self.verify_callback(session, code, state, error, error_description)
        if not code_verifier:
            raise InvalidRequest("Invalid state")

        settings = get_twitter_settings()
        if not settings.CLIENT_ID or not settings.CLIENT_SECRET or not settings.REDIRECT_URI:
            raise ConfigurationError("Missing Twitter environment variables")

        token_data = await self.exchange_code(code, code_verifier)
        access_token = token_data["access_token"]
        max_age = int(token_data.get("expires_in") or settings.DEFAULT_TOKEN_MAX_AGE)

        user_info = await self.get_user_info(access_token)
        logger.info(f"Twitter user connected: @{user_info.get('username', '')} ({user_info.get('id', '')})")

        return PlatformConnection(
            platform=Platform.TWITTER,
            access_token=access_token,
            max_age=max_age,
            account_id=user_info.get("id"),
            username=user_info.get("username")
        )

    async def exchange_code(self, code: str, code_verifier: str) -> Dict[str, Any]:
        """
        Exchange an authorization code for an access token.

        Raises:
            UpstreamError: If Twitter rejects the exchange or omits access_token
        """
        settings = get_twitter_settings()
        data = {
            "code": code,
            "grant_type": "authorization_code",
            "client_id": settings.CLIENT_ID,
            "redirect_uri": settings.REDIRECT_URI,
            "code_verifier": code_verifier,
        }

        try:
            response = await self.http_client.post(
                TOKEN_URL,
                data=data,
                auth=(settings.CLIENT_ID, settings.CLIENT_SECRET),
                headers={"Content-Type": "application/x-www-form-urlencoded;charset=UTF-8"}
            )
        except httpx.HTTPError as e:
            logger.error(f"Twitter token request failed: {str(e)}")
            raise UpstreamError("Unexpected error during token exchange", str(e))

        if response.is_error:
            logger.error(f"Twitter token error: {response.text}")
            raise UpstreamError("Failed to exchange token with Twitter", response.text)

        try:
            token_data = response.json()
        except ValueError:
            raise UpstreamError("Failed to exchange token with Twitter", response.text)

        if not isinstance(token_data, dict) or not token_data.get("access_token"):
            raise UpstreamError("No access_token in Twitter response", token_data)

        return token_data

    async def get_user_info(self, access_token: str) -> Dict[str, Any]:
        """
        Get the connected Twitter user's id and username.

        Failures are logged and an empty dict is returned; this lookup never
        blocks a connection.
        """
        try:
            response = await self.http_client.get(
                USERS_ME_URL,
                headers={"Authorization": f"Bearer {access_token}"}
            )
            if response.is_success:
                payload = response.json()
                if isinstance(payload, dict):
                    return payload.get("data") or {}
            logger.warning(f"Twitter users/me returned {response.status_code}")
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Failed to fetch Twitter user info: {str(e)}")
        return {}
