"""
Signed transient cookies for the authorization flow.

Each cookie value is signed with itsdangerous using the session secret and
the cookie name as salt, so a value cannot be moved between cookies. A
value whose signature does not verify is treated as if the cookie were
absent.
"""

import logging

from fastapi import Request, Response
from itsdangerous import BadSignature, URLSafeSerializer

from spotify_auth.logging_config import log_fields
from spotify_auth.oauth.config import (
    RETURN_URL_COOKIE_NAME,
    STATE_COOKIE_NAME,
    RelayConfig,
)


logger = logging.getLogger(__name__)


def _serializer(secret: str, cookie_name: str) -> URLSafeSerializer:
    return URLSafeSerializer(secret, salt=cookie_name)


def sign_cookie_value(secret: str, cookie_name: str, value: str) -> str:
    """Sign a cookie value for the named cookie."""
    return _serializer(secret, cookie_name).dumps(value)


def unsign_cookie_value(secret: str, cookie_name: str, signed: str | None) -> str | None:
    """
    Verify and decode a signed cookie value.

    Returns:
        The signed value, or None if missing, malformed or tampered with
    """
    if not signed:
        return None

    try:
        value = _serializer(secret, cookie_name).loads(signed)
    except BadSignature:
        logger.warning(
            "Rejected cookie with invalid signature",
            extra=log_fields(cookie=cookie_name),
        )
        return None

    return value if isinstance(value, str) else None


def set_flow_cookies(
    response: Response,
    state: str,
    return_url: str,
    config: RelayConfig,
    secure: bool,
) -> None:
    """Store the state token and return URL as session cookies."""
    for name, value in (
        (STATE_COOKIE_NAME, state),
        (RETURN_URL_COOKIE_NAME, return_url),
    ):
        response.set_cookie(
            key=name,
            value=sign_cookie_value(config.session_secret, name, value),
            httponly=True,
            secure=secure,
            samesite="lax",
        )


def read_flow_cookies(request: Request, config: RelayConfig) -> tuple[str | None, str | None]:
    """
    Read the stored state token and return URL.

    Returns:
        (state, return_url); either is None when absent or invalid
    """
    state = unsign_cookie_value(
        config.session_secret,
        STATE_COOKIE_NAME,
        request.cookies.get(STATE_COOKIE_NAME),
    )
    return_url = unsign_cookie_value(
        config.session_secret,
        RETURN_URL_COOKIE_NAME,
        request.cookies.get(RETURN_URL_COOKIE_NAME),
    )
    return state, return_url


def clear_flow_cookies(response: Response) -> None:
    """Expire both flow cookies; they are single-use."""
    response.delete_cookie(STATE_COOKIE_NAME)
    response.delete_cookie(RETURN_URL_COOKIE_NAME)
