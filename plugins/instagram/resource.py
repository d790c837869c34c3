# plugins/instagram/resource.py
"""
Instagram Resource Plugin
=========================

Publishes a composed post to the connected Instagram account.

Flow:
  1. GET  {graph}/me?fields=id                 → user_id
  2. POST {graph}/{user_id}/media              → creation_id
       with media:    multipart form (file, caption, access_token)
       without media: media_type=CAROUSEL container carrying the caption
  3. POST {graph}/{user_id}/media_publish      → published media

Instagram always needs a container before it can publish, so text-only
posts still make the creation call; Twitter has no equivalent step.
"""

import logging
from typing import Any, Dict, List, Union

import httpx

from errors import Unauthenticated, UpstreamError
from models import Platform
from plugins import ResourcePlugin
from plugins.instagram.config import get_instagram_settings

logger = logging.getLogger(__name__)


def _json_or_text(response: httpx.Response) -> Union[Dict[str, Any], str]:
    try:
        return response.json()
    except ValueError:
        return response.text


class InstagramResourcePlugin(ResourcePlugin):
    """
    Plugin for publishing to Instagram.

    Class Attributes:
        service_name (str): The unique identifier for this plugin
    """

    service_name = Platform.INSTAGRAM.value

    @property
    def graph_base_url(self) -> str:
        return get_instagram_settings().graph_base_url

    async def publish(self, access_token: str, content: str, media_urls: List[str]) -> Any:
        """
        Create a media container for the post and publish it.

        Args:
            access_token (str): The user's Instagram access token
            content (str): The caption
            media_urls (List[str]): Absolute media URLs; only the first is used

        Returns:
            Any: Instagram's media_publish response body, unmodified

        Raises:
            Unauthenticated: If Instagram does not accept the token
            UpstreamError: If container creation or publishing fails
        """
        user_id = await self.get_user_id(access_token)

        media = await self.download_media(media_urls)
        if media is not None:
            creation_id = await self.upload_media(user_id, access_token, content, media)
        else:
            creation_id = await self.create_text_container(user_id, access_token, content)

        return await self.publish_container(user_id, access_token, creation_id)

    async def get_user_id(self, access_token: str) -> str:
        """
        Resolve the Instagram user id the token belongs to.

        Raises:
            Unauthenticated: If the lookup fails
        """
        try:
            response = await self.http_client.get(
                f"{self.graph_base_url}/me",
                params={"fields": "id", "access_token": access_token}
            )
        except httpx.HTTPError as e:
            logger.error(f"Instagram user lookup failed: {str(e)}")
            raise UpstreamError("Failed to get Instagram user info", str(e))

        if response.is_error:
            raise Unauthenticated("Failed to get Instagram user info", _json_or_text(response))

        payload = _json_or_text(response)
        user_id = payload.get("id") if isinstance(payload, dict) else None
        if not user_id:
            raise Unauthenticated("Failed to get Instagram user info", payload)
        return str(user_id)

    async def upload_media(self, user_id: str, access_token: str, caption: str, media: bytes) -> str:
        """
        Upload image bytes as a media container.

        Raises:
            UpstreamError: If the upload fails or no container id comes back
        """
        return await self._create_container(
            user_id,
            data={"caption": caption, "access_token": access_token},
            files={"file": ("image.jpg", media, "application/octet-stream")}
        )

    async def create_text_container(self, user_id: str, access_token: str, caption: str) -> str:
        """
        Create a caption-only CAROUSEL container.

        Raises:
            UpstreamError: If Instagram does not return a container id
        """
        return await self._create_container(
            user_id,
            data={"media_type": "CAROUSEL", "caption": caption, "access_token": access_token}
        )

    async def _create_container(self, user_id: str, data: Dict[str, str], files: Dict[str, Any] = None) -> str:
        try:
            response = await self.http_client.post(f"{self.graph_base_url}/{user_id}/media", data=data, files=files)
        except httpx.HTTPError as e:
            logger.error(f"Instagram media request failed: {str(e)}")
            raise UpstreamError("Failed to upload media to Instagram", str(e))

        payload = _json_or_text(response)
        creation_id = payload.get("id") if isinstance(payload, dict) else None
        if response.is_error or not creation_id:
            logger.error(f"Instagram media error: {payload}")
            raise UpstreamError("Failed to upload media to Instagram", payload)

        logger.info(f"Created Instagram container: {creation_id}")
        return str(creation_id)

    async def publish_container(self, user_id: str, access_token: str, creation_id: str) -> Any:
        """
        Publish a previously created container.

        Raises:
            UpstreamError: If Instagram rejects the publish call
        """
        try:
            response = await self.http_client.post(
                f"{self.graph_base_url}/{user_id}/media_publish",
                data={"creation_id": creation_id, "access_token": access_token}
            )
        except httpx.HTTPError as e:
            logger.error(f"Instagram publish request failed: {str(e)}")
            raise UpstreamError("Failed to publish to Instagram", str(e))

        if response.is_error:
            details = _json_or_text(response)
            logger.error(f"Instagram publish error: {details}")
            raise UpstreamError("Failed to publish to Instagram", details)

        logger.info(f"Published Instagram container {creation_id}")
        return _json_or_text(response)
