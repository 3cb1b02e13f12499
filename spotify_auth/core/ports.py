"""
Port definitions (interfaces) for the relay.

The web handlers depend on this interface, not on the HTTP client that
implements it.
"""

from typing import Any, Protocol


class TokenExchanger(Protocol):
    """
    Port (interface) for the provider's token endpoint.

    Implemented by infrastructure adapters (e.g., SpotifyTokenClient).
    Token responses are returned as opaque dictionaries.
    """

    async def exchange_code(self, code: str, redirect_uri: str) -> dict[str, Any]:
        """
        Exchange an authorization code for tokens.

        Raises:
            TokenEndpointError: If the provider rejects the code
        """
        ...

    async def refresh_token(
        self, refresh_token: str, redirect_uri: str
    ) -> dict[str, Any]:
        """
        Exchange a refresh token for a new access token.

        Raises:
            TokenEndpointError: If the provider rejects the refresh token
        """
        ...
