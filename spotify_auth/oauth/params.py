"""
Request parameter resolution and URL helpers for the OAuth flow.

Pure functions: they read the request and configuration and never touch
cookies or the network.
"""

import json
from dataclasses import dataclass
from typing import Any

from authlib.common.urls import add_params_to_uri
from fastapi import Request

from spotify_auth.oauth.config import CALLBACK_PATH, DEFAULT_RETURN_PATH, RelayConfig


@dataclass(frozen=True)
class RequestParams:
    """Effective scope list and return URL for one authorization attempt."""

    scope: list[str]
    return_url: str


def app_url(path: str, request: Request, config: RelayConfig) -> str:
    """
    Build an absolute URL on this service.

    Uses BASE_URL when configured, otherwise the request's scheme, host and
    port (the port is omitted when it is the scheme default).
    """
    if config.base_url:
        return f"{config.base_url.rstrip('/')}{path}"
    return str(request.url.replace(path=path, query="", fragment=""))


def redirect_uri(request: Request, config: RelayConfig) -> str:
    """The callback URL registered with the provider."""
    return app_url(CALLBACK_PATH, request, config)


def default_return_url(request: Request, config: RelayConfig) -> str:
    """This service's own result endpoint."""
    return app_url(DEFAULT_RETURN_PATH, request, config)


def resolve_request_params(request: Request, config: RelayConfig) -> RequestParams:
    """Derive scope and return URL from the query, defaulting both."""
    raw_scope = request.query_params.get("scope")
    scope = raw_scope.split(",") if raw_scope else list(config.default_scope)

    return_url = request.query_params.get("returnUrl") or default_return_url(
        request, config
    )

    return RequestParams(scope=scope, return_url=return_url)


def is_valid_return_url(return_url: str, request: Request, config: RelayConfig) -> bool:
    """Exact-match check against the default return URL and the allow-list."""
    if return_url == default_return_url(request, config):
        return True
    return return_url in config.valid_return_urls


def build_auth_query(
    scope: list[str], redirect_uri: str, state: str, config: RelayConfig
) -> dict[str, str]:
    """Query parameters for the provider's authorization page."""
    return {
        "response_type": "code",
        "scope": " ".join(scope),
        "client_id": config.client_id or "",
        "redirect_uri": redirect_uri,
        "state": state,
    }


def build_authorize_url(auth_query: dict[str, str], config: RelayConfig) -> str:
    """Full URL of the provider's authorization page."""
    return add_params_to_uri(config.authorize_url, auth_query)


def _query_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, dict):
        return json.dumps(value, separators=(",", ":"))
    return str(value)


def flatten_query_params(data: dict[str, Any]) -> list[tuple[str, str]]:
    """
    Flatten an arbitrary JSON object into query parameter pairs.

    Lists become repeated keys; nested objects are encoded as compact JSON.
    """
    pairs: list[tuple[str, str]] = []
    for key, value in data.items():
        if isinstance(value, list):
            pairs.extend((key, _query_value(item)) for item in value)
        else:
            pairs.append((key, _query_value(value)))
    return pairs


def result_url(return_url: str, params: dict[str, Any]) -> str:
    """Return URL with the result appended to its query string."""
    return add_params_to_uri(return_url, flatten_query_params(params))
