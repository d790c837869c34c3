# plugins/twitter/config.py
"""
Configuration for Twitter plugin
"""

from typing import Optional

from pydantic_settings import BaseSettings
from functools import lru_cache

class TwitterSettings(BaseSettings):
    """
    Twitter-specific settings

    These settings can be configured via environment variables
    prefixed with TWITTER_, e.g., TWITTER_CLIENT_ID
    """
    # OAuth 2.0 client credentials (never defaulted)
    CLIENT_ID: Optional[str] = None
    CLIENT_SECRET: Optional[str] = None
    REDIRECT_URI: Optional[str] = None

    # Scopes
    SCOPES: str = "tweet.read tweet.write users.read offline.access media.write"

    # Cookie lifetime when the token response has no expires_in
    DEFAULT_TOKEN_MAX_AGE: int = 7200

    class Config:
        env_prefix = "TWITTER_"
        env_file = ".env"
        extra = "ignore"

@lru_cache()
def get_twitter_settings():
    """
    Get the Twitter settings, cached to avoid reloading
    """
    return TwitterSettings()
