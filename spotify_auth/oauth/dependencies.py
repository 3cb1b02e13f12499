"""
FastAPI dependencies for the relay endpoints.
"""

from typing import Annotated

from fastapi import Depends, Request

from spotify_auth.core.ports import TokenExchanger
from spotify_auth.infrastructure.spotify_token_client import SpotifyTokenClient
from spotify_auth.oauth.config import RelayConfig


def get_config(request: Request) -> RelayConfig:
    """Provide the configuration the application was built with."""
    return request.app.state.config


def get_token_client(
    config: Annotated[RelayConfig, Depends(get_config)],
) -> TokenExchanger:
    """Provide the token exchange client."""
    return SpotifyTokenClient(config)


# Type aliases for cleaner dependency injection
Config = Annotated[RelayConfig, Depends(get_config)]
TokenClient = Annotated[TokenExchanger, Depends(get_token_client)]
