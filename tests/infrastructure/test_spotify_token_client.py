"""
Unit tests for the Spotify token client.
"""

import base64
from urllib.parse import parse_qs

import httpx
import pytest
from respx import MockRouter

from spotify_auth.core.exceptions import TokenEndpointError, TokenEndpointUnavailableError
from spotify_auth.infrastructure.spotify_token_client import SpotifyTokenClient

TOKEN_URL = "https://accounts.spotify.com/api/token"
CALLBACK_URL = "http://testserver/callback"


def _form(request: httpx.Request) -> dict[str, list[str]]:
    return parse_qs(request.content.decode("utf-8"))


@pytest.mark.asyncio
async def test_exchange_code_success(respx_mock: MockRouter, relay_config, token_response):
    """
    Test exchange_code posts the authorization-code grant with Basic auth.
    """
    route = respx_mock.post(TOKEN_URL).mock(
        return_value=httpx.Response(200, json=token_response)
    )

    client = SpotifyTokenClient(relay_config)
    result = await client.exchange_code("auth-code-123", CALLBACK_URL)

    assert result == token_response
    assert route.call_count == 1

    request = route.calls.last.request
    expected_auth = base64.b64encode(b"test-client-id:test-client-secret").decode()
    assert request.headers["Authorization"] == f"Basic {expected_auth}"
    assert request.headers["Content-Type"] == "application/x-www-form-urlencoded"
    assert _form(request) == {
        "code": ["auth-code-123"],
        "redirect_uri": [CALLBACK_URL],
        "grant_type": ["authorization_code"],
    }


@pytest.mark.asyncio
async def test_refresh_token_success(respx_mock: MockRouter, relay_config):
    """
    Test refresh_token posts the refresh-token grant.
    """
    payload = {"access_token": "new-token", "expires_in": 3600}
    route = respx_mock.post(TOKEN_URL).mock(
        return_value=httpx.Response(200, json=payload)
    )

    client = SpotifyTokenClient(relay_config)
    result = await client.refresh_token("refresh-abc", CALLBACK_URL)

    assert result == payload
    assert _form(route.calls.last.request) == {
        "refresh_token": ["refresh-abc"],
        "redirect_uri": [CALLBACK_URL],
        "grant_type": ["refresh_token"],
    }


@pytest.mark.asyncio
async def test_rejected_request_raises_with_status(respx_mock: MockRouter, relay_config):
    """
    Test a 400 from the provider raises TokenEndpointError with its details.
    """
    error_body = {"error": "invalid_grant", "error_description": "Invalid authorization code"}
    respx_mock.post(TOKEN_URL).mock(return_value=httpx.Response(400, json=error_body))

    client = SpotifyTokenClient(relay_config)
    with pytest.raises(TokenEndpointError) as exc_info:
        await client.exchange_code("bad-code", CALLBACK_URL)

    assert exc_info.value.status_code == 400
    assert exc_info.value.reason == "Bad Request"
    assert exc_info.value.payload == error_body
    assert exc_info.value.message == "Status 400: Bad Request"


@pytest.mark.asyncio
async def test_rejected_request_without_json_body(respx_mock: MockRouter, relay_config):
    """
    Test a non-JSON error body leaves the payload empty.
    """
    respx_mock.post(TOKEN_URL).mock(return_value=httpx.Response(503, text="down"))

    client = SpotifyTokenClient(relay_config)
    with pytest.raises(TokenEndpointError) as exc_info:
        await client.refresh_token("refresh-abc", CALLBACK_URL)

    assert exc_info.value.status_code == 503
    assert exc_info.value.payload is None


@pytest.mark.asyncio
async def test_network_error_raises_unavailable(respx_mock: MockRouter, relay_config):
    """
    Test a transport failure raises TokenEndpointUnavailableError.
    """
    respx_mock.post(TOKEN_URL).mock(side_effect=httpx.ConnectError("Connection failed"))

    client = SpotifyTokenClient(relay_config)
    with pytest.raises(TokenEndpointUnavailableError) as exc_info:
        await client.exchange_code("auth-code-123", CALLBACK_URL)

    assert exc_info.value.status_code == 502
    assert "Connection failed" in exc_info.value.detail


@pytest.mark.asyncio
async def test_success_with_non_object_body(respx_mock: MockRouter, relay_config):
    """
    Test a 200 whose body is not a JSON object is treated as a bad gateway.
    """
    respx_mock.post(TOKEN_URL).mock(return_value=httpx.Response(200, json=["unexpected"]))

    client = SpotifyTokenClient(relay_config)
    with pytest.raises(TokenEndpointError) as exc_info:
        await client.exchange_code("auth-code-123", CALLBACK_URL)

    assert exc_info.value.status_code == 502
