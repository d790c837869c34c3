"""
Shared pytest fixtures and configuration
"""

import os
import sys
import tempfile
from pathlib import Path
from typing import List
from unittest.mock import patch
from urllib.parse import parse_qs, urlparse

import httpx
import pytest
from fastapi.testclient import TestClient

# Add the project root to Python path to make imports work
sys.path.insert(0, str(Path(__file__).parent.parent))

# Set test environment variables
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="blip-uploads-")
os.environ["TWITTER_CLIENT_ID"] = "test-twitter-client-id"
os.environ["TWITTER_CLIENT_SECRET"] = "test-twitter-client-secret"
os.environ["TWITTER_REDIRECT_URI"] = "http://testserver/connect/twitter/callback"
os.environ["INSTAGRAM_APP_ID"] = "test-instagram-app-id"
os.environ["INSTAGRAM_APP_SECRET"] = "test-instagram-app-secret"
os.environ["INSTAGRAM_REDIRECT_URI"] = "http://testserver/connect/instagram/callback"

from http_client import get_http_client


def endpoint(url: httpx.URL) -> str:
    """Return a URL without its query string, for matching vendor calls."""
    return f"{url.scheme}://{url.host}{url.path}"


class MockVendor:
    """
    Stand-in for the Twitter and Instagram APIs.

    Responses are registered per (method, URL without query) and every
    request that reaches the transport is recorded, so tests can assert both
    on what was called and on what was never called.
    """

    def __init__(self):
        self.responses = {}
        self.requests: List[httpx.Request] = []

    def add(self, method: str, url: str, status_code: int = 200, json=None, text: str = None, content: bytes = None):
        self.responses[(method.upper(), url)] = (status_code, json, text, content)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, endpoint(request.url))
        if key not in self.responses:
            return httpx.Response(404, json={"error": "unexpected request", "url": str(request.url)})

        status_code, json, text, content = self.responses[key]
        if json is not None:
            return httpx.Response(status_code, json=json)
        if content is not None:
            return httpx.Response(status_code, content=content)
        return httpx.Response(status_code, text=text or "")

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def calls_to(self, url: str, method: str = None) -> List[httpx.Request]:
        return [
            request for request in self.requests
            if endpoint(request.url) == url and (method is None or request.method == method.upper())
        ]


def form_body(request: httpx.Request) -> dict:
    """Decode a form-encoded request body into a flat dict."""
    return {key: values[0] for key, values in parse_qs(request.content.decode()).items()}


def query_params(url: str) -> dict:
    return {key: values[0] for key, values in parse_qs(urlparse(url).query).items()}


def token_cookies(response: httpx.Response, platform: str) -> List[str]:
    """Return the Set-Cookie headers of a response that carry a platform token."""
    return [
        header for header in response.headers.get_list("set-cookie")
        if header.startswith(f"{platform}_access_token=")
    ]


@pytest.fixture(scope="function")
def vendor() -> MockVendor:
    return MockVendor()


@pytest.fixture(scope="function")
def app(vendor):
    """
    The FastAPI app with vendor HTTP routed to the MockVendor.
    """
    from main import app as main_app

    async def override_get_http_client():
        async with httpx.AsyncClient(transport=vendor.transport()) as client:
            yield client

    main_app.dependency_overrides[get_http_client] = override_get_http_client
    yield main_app
    main_app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def client(app):
    """
    A test client that does not follow redirects, so OAuth hops can be inspected.
    """
    with TestClient(app, follow_redirects=False) as test_client:
        yield test_client


@pytest.fixture
def twitter_settings():
    from plugins.twitter.config import get_twitter_settings
    return get_twitter_settings()


@pytest.fixture
def instagram_settings():
    from plugins.instagram.config import get_instagram_settings
    return get_instagram_settings()


@pytest.fixture
def mock_tweepy_client():
    """
    Replace tweepy's v2 Client so no tweet is ever sent.
    """
    with patch("plugins.twitter.resource.tweepy.Client") as client_class:
        client_class.return_value.create_tweet.return_value = {
            "data": {"id": "1790000000000000000", "text": "Hello", "edit_history_tweet_ids": ["1790000000000000000"]}
        }
        yield client_class
