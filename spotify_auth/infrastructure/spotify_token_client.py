"""
Client for the Spotify accounts token endpoint.
"""

import logging
from typing import Any

import httpx

from spotify_auth.core.exceptions import TokenEndpointError, TokenEndpointUnavailableError
from spotify_auth.logging_config import log_fields
from spotify_auth.oauth.config import RelayConfig


logger = logging.getLogger(__name__)


class SpotifyTokenClient:
    """
    Token exchange against Spotify's token endpoint.

    Each call is a single form-encoded POST authenticated with HTTP Basic
    client credentials. Failures are raised, never retried.
    """

    def __init__(self, config: RelayConfig):
        self._config = config

    async def exchange_code(self, code: str, redirect_uri: str) -> dict[str, Any]:
        """Exchange an authorization code for tokens."""
        return await self._post_token(
            {
                "code": code,
                "redirect_uri": redirect_uri,
                "grant_type": "authorization_code",
            }
        )

    async def refresh_token(
        self, refresh_token: str, redirect_uri: str
    ) -> dict[str, Any]:
        """Exchange a refresh token for a new access token."""
        return await self._post_token(
            {
                "refresh_token": refresh_token,
                "redirect_uri": redirect_uri,
                "grant_type": "refresh_token",
            }
        )

    async def _post_token(self, data: dict[str, str]) -> dict[str, Any]:
        """
        POST to the token endpoint and return the decoded JSON object.

        Raises:
            TokenEndpointError: On a non-2xx response or a non-object body
            TokenEndpointUnavailableError: On a transport failure
        """
        grant_type = data["grant_type"]
        auth = httpx.BasicAuth(
            self._config.client_id or "", self._config.client_secret or ""
        )

        try:
            async with httpx.AsyncClient(
                timeout=self._config.token_request_timeout
            ) as client:
                response = await client.post(
                    self._config.token_url, data=data, auth=auth
                )
                response.raise_for_status()

        except httpx.HTTPStatusError as e:
            logger.warning(
                f"Token endpoint rejected {grant_type} request: "
                f"{e.response.status_code} {e.response.reason_phrase}",
                extra=log_fields(
                    grant_type=grant_type, status_code=e.response.status_code
                ),
            )
            raise TokenEndpointError(
                e.response.status_code,
                e.response.reason_phrase,
                _json_object_or_none(e.response),
            ) from e
        except httpx.RequestError as e:
            logger.error(f"Network error calling token endpoint: {e}")
            raise TokenEndpointUnavailableError(str(e)) from e

        payload = _json_object_or_none(response)
        if payload is None:
            logger.error(
                f"Token endpoint returned a non-object body for {grant_type} request"
            )
            raise TokenEndpointError(502, "Bad Gateway")

        logger.info(
            f"Token endpoint accepted {grant_type} request",
            extra=log_fields(grant_type=grant_type),
        )
        return payload


def _json_object_or_none(response: httpx.Response) -> dict[str, Any] | None:
    try:
        payload = response.json()
    except ValueError:
        return None
    return payload if isinstance(payload, dict) else None
