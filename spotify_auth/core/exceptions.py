"""
Domain exceptions for the relay.

These exceptions are raised by the OAuth helpers and the token client, and
are converted into HTTP responses either by the callback handler (as a
redirect) or by the centralized exception handlers in main.py.
"""

from typing import Any


class RelayError(Exception):
    """Base exception for relay errors."""

    pass


class InvalidReturnUrlError(RelayError):
    """
    Raised when a caller asks for a return URL outside the allow-list.

    Results in a 403 before any interaction with the provider.
    """

    def __init__(self, return_url: str):
        self.return_url = return_url
        super().__init__(f"Return URL not allowed: {return_url}")


class TokenEndpointError(RelayError):
    """
    Raised when the provider's token endpoint rejects a request.

    Carries the upstream status code, reason phrase and, when the upstream
    body was JSON, the decoded payload.
    """

    def __init__(
        self,
        status_code: int,
        reason: str,
        payload: dict[str, Any] | None = None,
    ):
        self.status_code = status_code
        self.reason = reason
        self.payload = payload
        super().__init__(self.message)

    @property
    def message(self) -> str:
        """Summary in the form forwarded to callers."""
        return f"Status {self.status_code}: {self.reason}"


class TokenEndpointUnavailableError(TokenEndpointError):
    """Raised when the token endpoint cannot be reached at all."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(502, "Bad Gateway")
