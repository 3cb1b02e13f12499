"""
Spotify authorization-code relay endpoints.

- GET /login - Start the OAuth flow
- GET /callback - Exchange the code and forward the result to the return URL
- GET /refresh - Refresh-token passthrough
- GET /result - Default landing page, echoes its query
- GET /debug - Show what /login would do for the same request
"""

import hmac
import logging
from typing import Annotated, Any

from authlib.common.security import generate_token
from fastapi import APIRouter, Query, Request, status
from fastapi.responses import RedirectResponse

from spotify_auth.core.exceptions import InvalidReturnUrlError, TokenEndpointError
from spotify_auth.logging_config import log_fields
from spotify_auth.oauth.config import DEFAULT_RETURN_PATH
from spotify_auth.oauth.cookies import (
    clear_flow_cookies,
    read_flow_cookies,
    set_flow_cookies,
)
from spotify_auth.oauth.dependencies import Config, TokenClient
from spotify_auth.oauth.models import DebugResponse
from spotify_auth.oauth.params import (
    build_auth_query,
    build_authorize_url,
    default_return_url,
    is_valid_return_url,
    redirect_uri,
    resolve_request_params,
    result_url,
)


logger = logging.getLogger(__name__)

router = APIRouter(tags=["spotify-auth"])

STATE_TOKEN_LENGTH = 32


def _states_match(received: str | None, stored: str | None) -> bool:
    if received is None or stored is None:
        return False
    return hmac.compare_digest(received.encode("utf-8"), stored.encode("utf-8"))


def _result_redirect(return_url: str, params: dict[str, Any]) -> RedirectResponse:
    """Redirect to the return URL with the result as query parameters."""
    response = RedirectResponse(
        url=result_url(return_url, params),
        status_code=status.HTTP_302_FOUND,
    )
    clear_flow_cookies(response)
    return response


@router.get("/debug", response_model=DebugResponse)
async def debug(request: Request, config: Config) -> DebugResponse:
    """
    Diagnostic dump of the values /login would compute.

    Sets no cookies and issues no redirect.
    """
    callback_url = redirect_uri(request, config)
    params = resolve_request_params(request, config)
    auth_query = build_auth_query(
        params.scope, callback_url, generate_token(STATE_TOKEN_LENGTH), config
    )

    return DebugResponse(
        port=config.port,
        redirect_uri=callback_url,
        return_url=params.return_url,
        scope=params.scope,
        auth_query=auth_query,
        auth_url=build_authorize_url(auth_query, config),
    )


@router.get("/login")
async def login(
    request: Request,
    config: Config,
    scope: Annotated[
        str | None, Query(description="Comma-separated scopes to request")
    ] = None,
    returnUrl: Annotated[
        str | None, Query(description="Where to deliver the result")
    ] = None,
) -> RedirectResponse:
    """
    Start the authorization flow.

    Stores a fresh state token and the return URL in cookies, then
    redirects to Spotify's consent page.

    Raises:
        InvalidReturnUrlError: If the return URL is not allowed (403)
    """
    state = generate_token(STATE_TOKEN_LENGTH)
    callback_url = redirect_uri(request, config)
    params = resolve_request_params(request, config)

    if not is_valid_return_url(params.return_url, request, config):
        logger.warning(
            "Rejected login with disallowed return URL",
            extra=log_fields(return_url=params.return_url),
        )
        raise InvalidReturnUrlError(params.return_url)

    auth_query = build_auth_query(params.scope, callback_url, state, config)
    response = RedirectResponse(
        url=build_authorize_url(auth_query, config),
        status_code=status.HTTP_302_FOUND,
    )
    set_flow_cookies(
        response,
        state=state,
        return_url=params.return_url,
        config=config,
        secure=callback_url.startswith("https"),
    )

    logger.info(
        "Redirecting to Spotify authorization",
        extra=log_fields(return_url=params.return_url, scope=auth_query["scope"]),
    )
    return response


@router.get("/callback")
async def callback(
    request: Request,
    config: Config,
    token_client: TokenClient,
    code: Annotated[str | None, Query(description="Authorization code")] = None,
    state: Annotated[str | None, Query(description="Echoed state token")] = None,
    error: Annotated[
        str | None, Query(description="Error reported by the provider")
    ] = None,
) -> RedirectResponse:
    """
    Handle the provider callback.

    Both flow cookies are cleared whatever the outcome. The result, or an
    ``error`` parameter, is forwarded to the stored return URL.
    """
    stored_state, stored_return_url = read_flow_cookies(request, config)

    return_url = stored_return_url or default_return_url(request, config)
    if not is_valid_return_url(return_url, request, config):
        logger.warning(
            "Stored return URL no longer allowed, using default",
            extra=log_fields(return_url=return_url),
        )
        return_url = default_return_url(request, config)

    if not _states_match(state, stored_state):
        logger.warning("OAuth callback state mismatch")
        return _result_redirect(return_url, {"error": "state_mismatch"})

    if error:
        logger.info(
            "Provider reported authorization error",
            extra=log_fields(error=error),
        )
        return _result_redirect(return_url, {"error": error})

    try:
        token = await token_client.exchange_code(
            code or "", redirect_uri(request, config)
        )
    except TokenEndpointError as e:
        logger.error(f"Authorization code exchange failed: {e.message}")
        return _result_redirect(return_url, {"error": e.message})

    logger.info(
        "Authorization code exchanged, forwarding tokens",
        extra=log_fields(return_url=return_url),
    )
    return _result_redirect(return_url, token)


@router.get("/refresh")
async def refresh(
    request: Request,
    config: Config,
    token_client: TokenClient,
    refresh_token: Annotated[str, Query(description="Refresh token to exchange")],
) -> dict[str, Any]:
    """
    Exchange a refresh token and return the provider's JSON unchanged.

    Upstream failures propagate as TokenEndpointError and are rendered with
    the upstream status by the application's exception handler.
    """
    return await token_client.refresh_token(
        refresh_token, redirect_uri(request, config)
    )


@router.get(DEFAULT_RETURN_PATH)
async def result(request: Request) -> dict[str, str | list[str]]:
    """
    Echo the received query parameters.

    A key given once maps to its value; a repeated key maps to the list of
    its values in order.
    """
    echoed: dict[str, list[str]] = {}
    for key, value in request.query_params.multi_items():
        echoed.setdefault(key, []).append(value)
    return {
        key: values[0] if len(values) == 1 else values
        for key, values in echoed.items()
    }
