# plugins/__init__.py
"""
Plugin System for Blip
======================

This module provides the foundation for the platform plugins of Blip. Each
social platform lives in its own package under ``plugins/`` and registers
three kinds of plugins:

1. Authorization Plugins: run the OAuth2 authorization-code flow for a
   platform (build the consent URL, validate the callback, exchange the code)
2. Resource Plugins: publish a composed post to the platform's API
3. Route Plugins: expose the platform's HTTP endpoints

Design Philosophy:
-----------------
Platforms are tagged variants, not implementations of a lowest common
denominator. Twitter and Instagram take different parameters, run different
optional steps and publish through different call shapes. The base classes
below only fix the edges the routes need (authorize URL in, connection out;
post in, vendor response out) and carry a few small helpers that every
platform happens to share, such as single-use OAuth state handling.

Adding a New Platform:
--------------------
1. Create a new directory under 'plugins/'
2. Implement an AuthorizationPlugin for the OAuth flow
3. Implement a ResourcePlugin for publishing
4. Implement a RoutePlugin exposing connect/callback/status/disconnect/publish
5. Register the plugins in the __init__.py of your plugin package
"""

from typing import Dict, List, Type, TypeVar, Optional, Any, MutableMapping
import logging
import secrets
from enum import Enum
from urllib.parse import urljoin

import httpx
from fastapi import APIRouter, Request, Response

from errors import InvalidRequest, UpstreamError
from models import ConnectionStatus, DisconnectResult, PlatformConnection, PublishRequest
import token_store

logger = logging.getLogger(__name__)

# Type definitions
T = TypeVar('T', bound='PluginBase')

class PluginType(str, Enum):
    """
    Enum defining the types of plugins supported by the system.

    Types:
        AUTHORIZATION: Plugins that run a platform's OAuth flow
        RESOURCE: Plugins that publish to a platform's API
        ROUTE: Plugins that provide HTTP endpoints
    """
    AUTHORIZATION = "authorization"
    RESOURCE = "resource"
    ROUTE = "route"

class PluginBase:
    """
    Base class for all plugins in Blip.

    Class Attributes:
        plugin_type (PluginType): The type of plugin
        service_name (str): Unique identifier for the platform this plugin supports
                           (e.g., "twitter", "instagram")
    """

    plugin_type: PluginType
    service_name: str

    @classmethod
    def get_metadata(cls) -> Dict[str, Any]:
        """
        Return metadata about the plugin for discovery and introspection.

        Returns:
            Dict[str, Any]: Dictionary containing plugin metadata including:
                - plugin_type: The type of plugin
                - service_name: The platform this plugin supports
                - class_name: The name of the plugin class
        """
        return {
            "plugin_type": cls.plugin_type,
            "service_name": cls.service_name,
            "class_name": cls.__name__
        }

class AuthorizationPlugin(PluginBase):
    """
    Base class for plugins that connect a platform account via OAuth2.

    Authorization plugins are responsible for:
    - Building the vendor consent URL for a fresh, unpredictable state
    - Validating the callback (code present, state matches) before any network call
    - Exchanging the authorization code for an access token
    - Any platform-specific follow-up such as long-lived token upgrades

    Pending state lives in the signed session cookie under
    ``{service_name}_oauth_state`` and is consumed on the first callback.

    Attributes:
        http_client (httpx.AsyncClient): Request-scoped client for vendor calls
    """

    plugin_type = PluginType.AUTHORIZATION

    def __init__(self, http_client: httpx.AsyncClient):
        self.http_client = http_client

    @property
    def state_key(self) -> str:
        return f"{self.service_name}_oauth_state"

    def issue_state(self, session: MutableMapping[str, Any]) -> str:
        """
        Generate a per-request anti-forgery state and remember it in the session.

        Args:
            session: The request session (signed cookie)

        Returns:
            str: The state value to send to the vendor
        """
        state = secrets.token_urlsafe(32)
        session[self.state_key] = state
        return state

    def verify_callback(
        self,
        session: MutableMapping[str, Any],
        code: Optional[str],
        state: Optional[str],
        error: Optional[str] = None,
        error_description: Optional[str] = None
    ) -> str:
        """
        Validate the callback parameters against the pending session state.

        The stored state is removed whatever the outcome, so a state value can
        only ever be redeemed once.

        Args:
            session: The request session (signed cookie)
            code: The authorization code returned by the vendor
            state: The state returned by the vendor
            error: Vendor error code, when the user denied consent
            error_description: Vendor error description

        Returns:
            str: The authorization code

        Raises:
            InvalidRequest: If the code is missing or the state does not match
        """
        expected_state = session.pop(self.state_key, None)

        if not code:
            details = None
            if error:
                details = {"error": error, "error_description": error_description}
            raise InvalidRequest("Missing ?code", details)

        if not state or not expected_state or not secrets.compare_digest(state, expected_state):
            logger.warning(f"Rejected {self.service_name} callback with invalid state")
            raise InvalidRequest("Invalid state")

        return code

    async def get_authorization_url(self, session: MutableMapping[str, Any]) -> str:
        """
        Build the vendor authorization URL for this platform.

        Raises:
            ConfigurationError: If client credentials are missing
            NotImplementedError: If the subclass doesn't implement this method
        """
        raise NotImplementedError("Subclasses must implement get_authorization_url")

    async def process_callback(
        self,
        session: MutableMapping[str, Any],
        code: Optional[str],
        state: Optional[str],
        error: Optional[str] = None,
        error_description: Optional[str] = None
    ) -> PlatformConnection:
        """
        Validate the callback and exchange the code for an access token.

        Raises:
            InvalidRequest: If the callback parameters are invalid
            ConfigurationError: If client credentials are missing
            UpstreamError: If the token exchange fails
            NotImplementedError: If the subclass doesn't implement this method
        """
        raise NotImplementedError("Subclasses must implement process_callback")

class ResourcePlugin(PluginBase):
    """
    Base class for plugins that publish a composed post to a platform.

    Each platform implements its own linear pipeline in ``publish``. Only the
    first media URL is ever used; the rest are dropped.

    Attributes:
        http_client (httpx.AsyncClient): Request-scoped client for vendor calls
    """

    plugin_type = PluginType.RESOURCE

    def __init__(self, http_client: httpx.AsyncClient):
        self.http_client = http_client

    async def download_media(self, media_urls: List[str]) -> Optional[bytes]:
        """
        Fetch the bytes of the first media URL, if any.

        Args:
            media_urls (List[str]): Absolute media URLs from the composer

        Returns:
            Optional[bytes]: The media bytes, or None when no media was supplied

        Raises:
            UpstreamError: If the media cannot be fetched
        """
        if not media_urls:
            return None

        if len(media_urls) > 1:
            logger.info(f"{self.service_name}: using first of {len(media_urls)} media items, dropping the rest")

        media_url = media_urls[0]
        try:
            response = await self.http_client.get(media_url)
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
            logger.error(f"Error fetching media {media_url}: {str(e)}")
            raise UpstreamError("Failed to fetch media", str(e))

        if response.is_error:
            logger.error(f"Media fetch for {media_url} returned {response.status_code}")
            raise UpstreamError("Failed to fetch media", {"url": media_url, "status": response.status_code})

        return response.content

    async def publish(self, access_token: str, content: str, media_urls: List[str]) -> Any:
        """
        Publish a post and return the vendor's response body verbatim.

        Raises:
            Unauthenticated: If the platform rejects the token up front
            UpstreamError: If any upload or publish call fails
            NotImplementedError: If the subclass doesn't implement this method
        """
        raise NotImplementedError("Subclasses must implement publish")

class RoutePlugin(PluginBase):
    """
    Base class for plugins that provide their own routes.

    Route plugins expose the platform's HTTP surface. Status and disconnect
    depend only on the token cookie, so the base class can add them for
    every platform through ``add_connection_routes``.
    """

    plugin_type = PluginType.ROUTE

    def get_router(self) -> APIRouter:
        """
        Get the router for this plugin.

        Raises:
            NotImplementedError: If the subclass doesn't implement this method
        """
        raise NotImplementedError("Subclasses must implement get_router")

    def add_connection_routes(self, router: APIRouter) -> None:
        """Add ``GET /status/{platform}`` and ``POST /disconnect/{platform}`` to a router."""
        platform = self.service_name

        @router.get(f"/status/{platform}", response_model=ConnectionStatus)
        async def connection_status(request: Request):
            # Presence only; the token is not checked against the vendor
            return ConnectionStatus(connected=token_store.has_token(request, platform))

        @router.post(f"/disconnect/{platform}", response_model=DisconnectResult)
        async def disconnect(response: Response):
            token_store.clear_token_cookie(response, platform)
            logger.info(f"Disconnected {platform}")
            return DisconnectResult(success=True)

def prepare_publish_request(request: Request, body: PublishRequest) -> List[str]:
    """
    Check that a publish body carries something to post.

    Media URLs from the composer may be relative (``/uploads/...``); they are
    resolved against the request's base URL so plugins can fetch them.

    Returns:
        List[str]: The absolute media URLs, in composer order

    Raises:
        InvalidRequest: If there is neither text nor media, or a media URL is malformed
    """
    if not body.content.strip() and not body.media_urls:
        raise InvalidRequest("Nothing to publish")

    base_url = str(request.base_url)
    media_urls = []
    for url in body.media_urls:
        try:
            media_urls.append(urljoin(base_url, url))
        except ValueError:
            raise InvalidRequest("Invalid media URL", url)
    return media_urls

# Plugin registries
_authorization_plugins: Dict[str, Type[AuthorizationPlugin]] = {}
_resource_plugins: Dict[str, Type[ResourcePlugin]] = {}
_route_plugins: Dict[str, Type[RoutePlugin]] = {}

def register_authorization_plugin(plugin_class: Type[AuthorizationPlugin]) -> None:
    """
    Register an authorization plugin class under its service name.

    Args:
        plugin_class (Type[AuthorizationPlugin]): The authorization plugin class to register
    """
    _authorization_plugins[plugin_class.service_name] = plugin_class
    logger.info(f"Registered authorization plugin: {plugin_class.service_name}")

def register_resource_plugin(plugin_class: Type[ResourcePlugin]) -> None:
    """
    Register a resource plugin class under its service name.

    Args:
        plugin_class (Type[ResourcePlugin]): The resource plugin class to register
    """
    _resource_plugins[plugin_class.service_name] = plugin_class
    logger.info(f"Registered resource plugin: {plugin_class.service_name}")

def register_route_plugin(plugin_class: Type[RoutePlugin]) -> None:
    """
    Register a route plugin class under its service name.

    Args:
        plugin_class (Type[RoutePlugin]): The route plugin class to register
    """
    _route_plugins[plugin_class.service_name] = plugin_class
    logger.info(f"Registered route plugin: {plugin_class.service_name}")

def get_authorization_plugin(service_name: str) -> Optional[Type[AuthorizationPlugin]]:
    return _authorization_plugins.get(service_name)

def get_resource_plugin(service_name: str) -> Optional[Type[ResourcePlugin]]:
    return _resource_plugins.get(service_name)

def get_route_plugin(service_name: str) -> Optional[Type[RoutePlugin]]:
    return _route_plugins.get(service_name)

def get_all_authorization_plugins() -> Dict[str, Type[AuthorizationPlugin]]:
    return _authorization_plugins.copy()

def get_all_resource_plugins() -> Dict[str, Type[ResourcePlugin]]:
    return _resource_plugins.copy()

def get_all_route_plugins() -> Dict[str, Type[RoutePlugin]]:
    return _route_plugins.copy()
