"""
Request and response models.

Nothing here is persisted: connections live in browser cookies and
composed posts live only for the duration of one publish request.
"""

from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, Field


class Platform(str, Enum):
    """Social platforms Blip can connect to and publish on."""
    TWITTER = "twitter"
    INSTAGRAM = "instagram"

    @property
    def label(self) -> str:
        return {"twitter": "Twitter", "instagram": "Instagram"}[self.value]


class PlatformConnection(BaseModel):
    """Outcome of a successful OAuth callback exchange."""
    platform: Platform
    access_token: str
    max_age: int
    account_id: Optional[str] = None
    username: Optional[str] = None


class PublishRequest(BaseModel):
    """Body of ``POST /publish/{platform}`` as sent by the composer."""
    content: str = ""
    media_urls: List[str] = Field(default_factory=list, alias="mediaUrls")

    class Config:
        populate_by_name = True


class PublishResult(BaseModel):
    success: bool = True
    data: Any = None


class ConnectionStatus(BaseModel):
    connected: bool


class DisconnectResult(BaseModel):
    success: bool = True


class UploadedFile(BaseModel):
    url: str
    name: str
    size: int
    type: str


class UploadResult(BaseModel):
    files: List[UploadedFile]


class PlatformSummary(BaseModel):
    name: str
    connected: bool


class HomeResponse(BaseModel):
    app: str
    platforms: List[PlatformSummary]
