"""
Shared test configuration and fixtures.
"""

import pytest
from fastapi.testclient import TestClient
from starlette.requests import Request

from spotify_auth.main import create_app
from spotify_auth.oauth.config import RelayConfig

TOKEN_URL = "https://accounts.spotify.com/api/token"
ALLOWED_RETURN_URL = "https://app.example.com/spotify/done"


@pytest.fixture
def relay_config():
    """Relay configuration with test credentials and one allowed return URL."""
    return RelayConfig(
        client_id="test-client-id",
        client_secret="test-client-secret",
        session_secret="test-session-secret",
        port=8080,
        valid_return_urls=(ALLOWED_RETURN_URL,),
    )


@pytest.fixture
def app(relay_config):
    """Application built from the test configuration."""
    return create_app(relay_config)


@pytest.fixture
def client(app):
    """Test client for the relay application."""
    return TestClient(app)


@pytest.fixture
def make_request():
    """Factory for bare Starlette requests with a given host and query."""

    def _make(
        path: str = "/login",
        query_string: str = "",
        host: str = "testserver",
        scheme: str = "http",
    ) -> Request:
        scope = {
            "type": "http",
            "method": "GET",
            "scheme": scheme,
            "path": path,
            "query_string": query_string.encode("latin-1"),
            "headers": [(b"host", host.encode("latin-1"))],
            "server": (host.split(":")[0], 80),
        }
        return Request(scope)

    return _make


@pytest.fixture
def token_response():
    """Sample token endpoint payload."""
    return {
        "access_token": "BQD-access-token",
        "token_type": "Bearer",
        "scope": "user-read-private user-read-email",
        "expires_in": 3600,
        "refresh_token": "AQB-refresh-token",
    }
