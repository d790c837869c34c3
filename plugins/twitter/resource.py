# plugins/twitter/resource.py
"""
Twitter Resource Plugin
=======================

Publishes a composed post to Twitter on behalf of the connected user.

Flow:
  1. (media only) fetch the first media URL and POST it as multipart form
     data to https://api.twitter.com/2/media/upload  → media id
  2. POST https://api.twitter.com/2/tweets with the text inline and the
     media id attached, through tweepy's v2 Client

Text-only posts skip step 1 entirely; Twitter needs no separate creation
call for them.
"""

import logging
from typing import Any, Dict, List, Optional, Union

import httpx
import requests
import tweepy
from starlette.concurrency import run_in_threadpool

from errors import UpstreamError
from models import Platform
from plugins import ResourcePlugin

logger = logging.getLogger(__name__)

MEDIA_UPLOAD_URL = "https://api.twitter.com/2/media/upload"


def _error_details(error: tweepy.HTTPException) -> Union[Dict[str, Any], str]:
    """Pull the vendor error body out of a tweepy HTTP error."""
    try:
        return error.response.json()
    except ValueError:
        return error.response.text


class TwitterResourcePlugin(ResourcePlugin):
    """
    Plugin for publishing to Twitter.

    Class Attributes:
        service_name (str): The unique identifier for this plugin
    """

    service_name = Platform.TWITTER.value

    async def publish(self, access_token: str, content: str, media_urls: List[str]) -> Any:
        """
        Post a tweet, optionally with the first media item attached.

        Args:
            access_token (str): The user's OAuth 2.0 bearer token
            content (str): The tweet text
            media_urls (List[str]): Absolute media URLs; only the first is used

        Returns:
            Any: Twitter's response body, unmodified

        Raises:
            UpstreamError: If the media upload or tweet creation fails
        """
        media_ids = None
        media = await self.download_media(media_urls)
        if media is not None:
            media_ids = [await self.upload_media(access_token, media)]

        return await self.create_tweet(access_token, content, media_ids)

    async def upload_media(self, access_token: str, media: bytes) -> str:
        """
        Upload image bytes to Twitter and return the media id.

        Raises:
            UpstreamError: If the upload fails or no media id comes back
        """
        try:
            response = await self.http_client.post(
                MEDIA_UPLOAD_URL,
                headers={"Authorization": f"Bearer {access_token}"},
                data={"media_category": "tweet_image"},
                files={"media": ("image.jpg", media, "application/octet-stream")}
            )
        except httpx.HTTPError as e:
            logger.error(f"Twitter media upload request failed: {str(e)}")
            raise UpstreamError("Failed to upload media to Twitter", str(e))

        if response.is_error:
            logger.error(f"Twitter media upload error: {response.text}")
            raise UpstreamError("Failed to upload media to Twitter", response.text)

        try:
            payload = response.json()
        except ValueError:
            raise UpstreamError("Failed to upload media to Twitter", response.text)

        media_id = None
        if isinstance(payload, dict):
            data = payload.get("data") or {}
            media_id = data.get("id") or payload.get("id") or payload.get("media_id_string")
        if not media_id:
            raise UpstreamError("Failed to upload media to Twitter", payload)

        logger.info(f"Uploaded media to Twitter: {media_id}")
        return str(media_id)

    async def create_tweet(self, access_token: str, content: str, media_ids: Optional[List[str]] = None) -> Any:
        """
        Create the tweet through tweepy's v2 Client.

        The client runs in the threadpool since tweepy is synchronous.

        Raises:
            UpstreamError: If Twitter rejects the tweet
        """
        def _create():
            client = tweepy.Client(bearer_token=access_token, return_type=dict)
            return client.create_tweet(text=content or None, media_ids=media_ids, user_auth=False)

        try:
            data = await run_in_threadpool(_create)
        except tweepy.HTTPException as e:
            logger.error(f"Twitter post error: {str(e)}")
            raise UpstreamError("Failed to post to Twitter", _error_details(e))
        except (tweepy.TweepyException, requests.RequestException) as e:
            logger.error(f"Twitter post error: {str(e)}")
            raise UpstreamError("Failed to post to Twitter", str(e))

        logger.info("Posted to Twitter")
        return data
