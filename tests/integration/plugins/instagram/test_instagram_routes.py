"""
Integration tests for the Instagram connect, status, disconnect and publish routes
"""

import pytest

from conftest import form_body, query_params, token_cookies
from plugins.instagram.auth import AUTHORIZE_URL

pytestmark = [pytest.mark.integration, pytest.mark.instagram]

GRAPH = "https://graph.instagram.com/v18.0"
TOKEN_URL = f"{GRAPH}/oauth/access_token"
REFRESH_URL = f"{GRAPH}/access_token"
ME_URL = f"{GRAPH}/me"
MEDIA_URL = f"{GRAPH}/17841400000000000/media"
PUBLISH_URL = f"{GRAPH}/17841400000000000/media_publish"


def start_connect(client) -> dict:
    response = client.get("/connect/instagram")
    assert response.status_code == 302
    return query_params(response.headers["location"])


class TestInstagramConnect:
    """GET /connect/instagram"""

    def test_redirects_to_instagram_authorize(self, client):
        response = client.get("/connect/instagram")

        assert response.status_code == 302
        location = response.headers["location"]
        assert location.startswith(AUTHORIZE_URL + "?")

        params = query_params(location)
        assert params["client_id"] == "test-instagram-app-id"
        assert params["redirect_uri"] == "http://testserver/connect/instagram/callback"
        assert params["response_type"] == "code"
        assert params["scope"] == "instagram_basic,instagram_content_publish,pages_read_engagement,pages_manage_metadata"
        assert params["state"]
        assert "code_challenge" not in params

    def test_missing_app_id_is_configuration_error(self, client, instagram_settings, monkeypatch):
        monkeypatch.setattr(instagram_settings, "APP_ID", None)

        response = client.get("/connect/instagram")

        assert response.status_code == 500
        assert response.json() == {"error": "Missing INSTAGRAM_APP_ID or INSTAGRAM_REDIRECT_URI in env"}


class TestInstagramCallback:
    """GET /connect/instagram/callback"""

    def test_long_lived_token_stored(self, client, vendor):
        vendor.add("POST", TOKEN_URL, json={"access_token": "ig-short-token", "user_id": 17841400000000000})
        vendor.add("GET", REFRESH_URL, json={"access_token": "ig-long-token", "token_type": "bearer", "expires_in": 5183944})
        vendor.add("GET", ME_URL, json={"id": "17841400000000000", "username": "blipper"})
        params = start_connect(client)

        response = client.get("/connect/instagram/callback", params={"code": "ig-code", "state": params["state"]})

        assert response.status_code == 302
        assert response.headers["location"] == "/"
        assert token_cookies(response, "instagram") == [
            "instagram_access_token=ig-long-token; HttpOnly; Path=/; SameSite=Lax; Max-Age=5184000"
        ]

    def test_token_exchange_sends_secret_in_form(self, client, vendor):
        vendor.add("POST", TOKEN_URL, json={"access_token": "ig-short-token"})
        params = start_connect(client)

        client.get("/connect/instagram/callback", params={"code": "ig-code", "state": params["state"]})

        [token_request] = vendor.calls_to(TOKEN_URL, "POST")
        assert "authorization" not in token_request.headers
        assert form_body(token_request) == {
            "client_id": "test-instagram-app-id",
            "client_secret": "test-instagram-app-secret",
            "grant_type": "authorization_code",
            "redirect_uri": "http://testserver/connect/instagram/callback",
            "code": "ig-code",
        }

    def test_failed_upgrade_keeps_short_lived_token(self, client, vendor):
        vendor.add("POST", TOKEN_URL, json={"access_token": "ig-short-token"})
        vendor.add("GET", REFRESH_URL, status_code=400, json={"error": {"message": "Unsupported request"}})
        params = start_connect(client)

        response = client.get("/connect/instagram/callback", params={"code": "ig-code", "state": params["state"]})

        assert response.status_code == 302
        assert token_cookies(response, "instagram") == [
            "instagram_access_token=ig-short-token; HttpOnly; Path=/; SameSite=Lax; Max-Age=5184000"
        ]

    def test_missing_code_rejected(self, client, vendor):
        params = start_connect(client)

        response = client.get("/connect/instagram/callback", params={"state": params["state"]})

        assert response.status_code == 400
        assert response.json()["error"] == "Missing ?code"
        assert vendor.requests == []

    def test_invalid_state_rejected(self, client, vendor):
        start_connect(client)

        response = client.get("/connect/instagram/callback", params={"code": "ig-code", "state": "wrong"})

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid state"
        assert vendor.requests == []

    def test_exchange_error_sets_no_cookie(self, client, vendor):
        vendor.add("POST", TOKEN_URL, status_code=400, text="invalid code")
        params = start_connect(client)

        response = client.get("/connect/instagram/callback", params={"code": "ig-code", "state": params["state"]})

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to exchange token with Instagram", "details": "invalid code"}
        assert token_cookies(response, "instagram") == []

    def test_response_without_access_token_fails(self, client, vendor):
        vendor.add("POST", TOKEN_URL, json={"user_id": 1})
        params = start_connect(client)

        response = client.get("/connect/instagram/callback", params={"code": "ig-code", "state": params["state"]})

        assert response.status_code == 500
        assert response.json()["error"] == "No access_token in Instagram response"


class TestInstagramStatusAndDisconnect:
    """GET /status/instagram and POST /disconnect/instagram"""

    def test_status_reflects_cookie(self, client):
        assert client.get("/status/instagram").json() == {"connected": False}

        client.cookies.set("instagram_access_token", "ig-long-token")

        assert client.get("/status/instagram").json() == {"connected": True}

    def test_disconnect_clears_only_instagram(self, client):
        client.cookies.set("instagram_access_token", "ig-long-token")
        client.cookies.set("twitter_access_token", "tw-access-token")

        response = client.post("/disconnect/instagram")

        assert response.json() == {"success": True}
        assert token_cookies(response, "instagram") == [
            "instagram_access_token=; HttpOnly; Path=/; Max-Age=0; SameSite=Lax"
        ]
        assert token_cookies(response, "twitter") == []


class TestInstagramPublish:
    """POST /publish/instagram"""

    def test_requires_token_cookie(self, client, vendor):
        response = client.post("/publish/instagram", json={"content": "Hello"})

        assert response.status_code == 401
        assert response.json()["error"] == "Not authenticated with Instagram"
        assert vendor.requests == []

    def test_caption_only_uses_carousel_container(self, client, vendor):
        client.cookies.set("instagram_access_token", "ig-long-token")
        vendor.add("GET", ME_URL, json={"id": "17841400000000000"})
        vendor.add("POST", MEDIA_URL, json={"id": "container-1"})
        vendor.add("POST", PUBLISH_URL, json={"id": "17900000000000000"})

        response = client.post("/publish/instagram", json={"content": "Just words", "mediaUrls": []})

        assert response.status_code == 200
        assert response.json() == {"success": True, "data": {"id": "17900000000000000"}}

        [container_request] = vendor.calls_to(MEDIA_URL, "POST")
        assert form_body(container_request) == {
            "media_type": "CAROUSEL",
            "caption": "Just words",
            "access_token": "ig-long-token",
        }
        [publish_request] = vendor.calls_to(PUBLISH_URL, "POST")
        assert form_body(publish_request) == {"creation_id": "container-1", "access_token": "ig-long-token"}

    def test_media_post_uploads_first_image(self, client, vendor):
        client.cookies.set("instagram_access_token", "ig-long-token")
        vendor.add("GET", ME_URL, json={"id": "17841400000000000"})
        vendor.add("GET", "https://cdn.example.com/a.jpg", content=b"image-a")
        vendor.add("GET", "https://cdn.example.com/b.jpg", content=b"image-b")
        vendor.add("POST", MEDIA_URL, json={"id": "container-2"})
        vendor.add("POST", PUBLISH_URL, json={"id": "17900000000000001"})

        response = client.post("/publish/instagram", json={
            "content": "Look",
            "mediaUrls": ["https://cdn.example.com/a.jpg", "https://cdn.example.com/b.jpg"],
        })

        assert response.status_code == 200
        assert vendor.calls_to("https://cdn.example.com/b.jpg") == []

        [container_request] = vendor.calls_to(MEDIA_URL, "POST")
        assert container_request.headers["content-type"].startswith("multipart/form-data")
        assert b"image-a" in container_request.content
        assert b'name="caption"' in container_request.content
        assert b"Look" in container_request.content
        assert b"CAROUSEL" not in container_request.content

    def test_rejected_token_is_unauthenticated(self, client, vendor):
        client.cookies.set("instagram_access_token", "expired-token")
        vendor.add("GET", ME_URL, status_code=400, json={"error": {"message": "Invalid OAuth access token"}})

        response = client.post("/publish/instagram", json={"content": "Hello"})

        assert response.status_code == 401
        assert response.json()["error"] == "Failed to get Instagram user info"
        assert vendor.calls_to(MEDIA_URL) == []

    def test_container_error_stops_before_publish(self, client, vendor):
        client.cookies.set("instagram_access_token", "ig-long-token")
        vendor.add("GET", ME_URL, json={"id": "17841400000000000"})
        vendor.add("POST", MEDIA_URL, status_code=400, json={"error": {"message": "Invalid media"}})

        response = client.post("/publish/instagram", json={"content": "Hello"})

        assert response.status_code == 500
        assert response.json() == {
            "error": "Failed to upload media to Instagram",
            "details": {"error": {"message": "Invalid media"}},
        }
        assert vendor.calls_to(PUBLISH_URL) == []

    def test_publish_error_is_relayed(self, client, vendor):
        client.cookies.set("instagram_access_token", "ig-long-token")
        vendor.add("GET", ME_URL, json={"id": "17841400000000000"})
        vendor.add("POST", MEDIA_URL, json={"id": "container-3"})
        vendor.add("POST", PUBLISH_URL, status_code=500, json={"error": {"message": "Try again later"}})

        response = client.post("/publish/instagram", json={"content": "Hello"})

        assert response.status_code == 500
        assert response.json()["error"] == "Failed to publish to Instagram"

    def test_empty_post_rejected(self, client, vendor):
        client.cookies.set("instagram_access_token", "ig-long-token")

        response = client.post("/publish/instagram", json={})

        assert response.status_code == 400
        assert response.json()["error"] == "Nothing to publish"
        assert vendor.requests == []
