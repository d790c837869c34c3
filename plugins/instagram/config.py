# plugins/instagram/config.py
"""
Configuration for Instagram plugin
"""

from typing import Optional

from pydantic_settings import BaseSettings
from functools import lru_cache

class InstagramSettings(BaseSettings):
    """
    Instagram-specific settings

    These settings can be configured via environment variables
    prefixed with INSTAGRAM_, e.g., INSTAGRAM_APP_ID
    """
    # App credentials (never defaulted)
    APP_ID: Optional[str] = None
    APP_SECRET: Optional[str] = None
    REDIRECT_URI: Optional[str] = None

    SCOPES: str = "instagram_basic,instagram_content_publish,pages_read_engagement,pages_manage_metadata"

    GRAPH_VERSION: str = "v18.0"

    # Long-lived tokens are valid for 60 days
    TOKEN_MAX_AGE: int = 60 * 24 * 60 * 60

    class Config:
        env_prefix = "INSTAGRAM_"
        env_file = ".env"
        extra = "ignore"

    @property
    def graph_base_url(self) -> str:
        return f"https://graph.instagram.com/{self.GRAPH_VERSION}"

@lru_cache()
def get_instagram_settings():
    """
    Get the Instagram settings, cached to avoid reloading
    """
    return InstagramSettings()
