"""
Relay configuration.

Loaded once from environment variables into an immutable object that is
handed to the application factory and injected into every handler.
"""

import logging
import os
import secrets
from dataclasses import dataclass, field
from functools import lru_cache


logger = logging.getLogger(__name__)


SPOTIFY_AUTHORIZE_URL = "https://accounts.spotify.com/authorize"
SPOTIFY_TOKEN_URL = "https://accounts.spotify.com/api/token"

# See: https://developer.spotify.com/documentation/web-api/concepts/scopes
DEFAULT_SCOPE = (
    "playlist-read-collaborative",
    "playlist-read-private",
    "user-library-read",
    "user-modify-playback-state",
    "user-read-currently-playing",
    "user-read-email",
    "user-read-playback-state",
    "user-read-private",
)

DEFAULT_RETURN_PATH = "/result"
CALLBACK_PATH = "/callback"

STATE_COOKIE_NAME = "spotify-auth-state"
RETURN_URL_COOKIE_NAME = "spotify-auth-return-uri"


def _split_list(raw: str | None) -> tuple[str, ...]:
    """Split a comma-separated env value, dropping blank entries."""
    if not raw:
        return ()
    return tuple(item.strip() for item in raw.split(",") if item.strip())


@dataclass(frozen=True)
class RelayConfig:
    """
    Relay configuration settings.

    Missing client credentials are tolerated: the provider rejects the
    resulting requests and the rejection is passed through to the caller.
    """

    client_id: str | None
    client_secret: str | None = field(repr=False)
    session_secret: str = field(repr=False, default_factory=lambda: secrets.token_urlsafe(32))
    port: int = 8080
    valid_return_urls: tuple[str, ...] = ()
    base_url: str | None = None
    token_request_timeout: float = 10.0
    cors_allow_origins: tuple[str, ...] = ("*",)
    authorize_url: str = SPOTIFY_AUTHORIZE_URL
    token_url: str = SPOTIFY_TOKEN_URL
    default_scope: tuple[str, ...] = DEFAULT_SCOPE

    @classmethod
    def from_env(cls) -> "RelayConfig":
        """Load configuration from environment variables."""
        session_secret = os.getenv("SESSION_SECRET_KEY")
        if not session_secret:
            logger.warning(
                "SESSION_SECRET_KEY not set; using a random per-process key. "
                "Cookies will not survive a restart or span multiple instances."
            )
            session_secret = secrets.token_urlsafe(32)

        return cls(
            client_id=os.getenv("SPOTIFY_CLIENT_ID"),
            client_secret=os.getenv("SPOTIFY_CLIENT_SECRET"),
            session_secret=session_secret,
            port=int(os.getenv("PORT", "8080")),
            valid_return_urls=_split_list(os.getenv("VALID_RETURN_URLS")),
            base_url=os.getenv("BASE_URL") or None,
            token_request_timeout=float(os.getenv("TOKEN_REQUEST_TIMEOUT", "10")),
            cors_allow_origins=_split_list(os.getenv("CORS_ALLOW_ORIGINS", "*")),
        )

    @property
    def has_credentials(self) -> bool:
        """Check if both client credentials are present."""
        return bool(self.client_id and self.client_secret)


@lru_cache()
def get_relay_config() -> RelayConfig:
    """Get relay configuration singleton."""
    return RelayConfig.from_env()
