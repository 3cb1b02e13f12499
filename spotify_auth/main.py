"""
FastAPI application for the Spotify OAuth relay.

This module wires configuration, middleware, exception handlers and routers.
OAuth flow logic lives in spotify_auth/oauth, the token client in
spotify_auth/infrastructure.
"""

import logging
from contextlib import asynccontextmanager
from datetime import UTC, datetime

# Configure logging FIRST, before other local imports
from spotify_auth.logging_config import log_fields, setup_global_logging

setup_global_logging()

from fastapi import FastAPI, Request, status  # noqa: E402
from fastapi.exceptions import RequestValidationError  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402
from fastapi.responses import JSONResponse, PlainTextResponse  # noqa: E402

from spotify_auth.core.exceptions import (  # noqa: E402
    InvalidReturnUrlError,
    TokenEndpointError,
    TokenEndpointUnavailableError,
)
from spotify_auth.oauth import router as oauth_router  # noqa: E402
from spotify_auth.oauth.config import RelayConfig, get_relay_config  # noqa: E402
from spotify_auth.oauth.models import HealthResponse  # noqa: E402

logger = logging.getLogger(__name__)


# ============================================================================
# Application Lifecycle
# ============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Reports configuration problems at startup without refusing to start.
    """
    config: RelayConfig = app.state.config
    if not config.has_credentials:
        logger.warning(
            "Spotify client credentials not configured "
            "(SPOTIFY_CLIENT_ID / SPOTIFY_CLIENT_SECRET)"
        )
    logger.info(
        "Spotify auth relay starting up",
        extra=log_fields(
            port=config.port, allowed_return_urls=len(config.valid_return_urls)
        ),
    )
    yield
    logger.info("Shutting down application...")


# ============================================================================
# Centralized Exception Handlers
# ============================================================================


async def invalid_return_url_handler(request: Request, exc: InvalidReturnUrlError):
    """Disallowed return URL: 403 with a plain-text body, no cookies."""
    return PlainTextResponse(
        "Invalid return URI",
        status_code=status.HTTP_403_FORBIDDEN,
    )


async def token_endpoint_error_handler(request: Request, exc: TokenEndpointError):
    """
    Upstream token endpoint failure outside the callback flow.

    Mirrors the upstream status. The upstream JSON error body is passed
    through when there is one.
    """
    if isinstance(exc, TokenEndpointUnavailableError):
        logger.error(f"Token endpoint unavailable: {exc.detail}")
    else:
        logger.warning(f"Token endpoint error: {exc.message}")

    return JSONResponse(
        status_code=exc.status_code,
        content=exc.payload if exc.payload is not None else {"error": exc.message},
    )


async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Missing or malformed query parameters: 422 with details."""
    logger.warning(f"Validation error on {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "status": "error",
            "message": "Invalid request parameters",
            "details": exc.errors(),
        },
    )


# ============================================================================
# Application Factory
# ============================================================================


def create_app(config: RelayConfig | None = None) -> FastAPI:
    """
    Build the relay application.

    Args:
        config: Relay configuration (loaded from the environment if not provided)

    Returns:
        Configured FastAPI application
    """
    if config is None:
        config = get_relay_config()

    app = FastAPI(
        title="Spotify Auth Relay",
        description="Relays the Spotify authorization-code flow to a return URL",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.config = config

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.cors_allow_origins),
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    app.add_exception_handler(InvalidReturnUrlError, invalid_return_url_handler)
    app.add_exception_handler(TokenEndpointError, token_endpoint_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    @app.get("/", response_model=HealthResponse)
    async def root():
        """Health check endpoint."""
        return HealthResponse(
            status="healthy",
            service="spotify-auth",
            timestamp=datetime.now(UTC).isoformat(),
        )

    @app.get("/health", response_model=HealthResponse, response_model_exclude_none=True)
    async def health():
        """Health check endpoint for Cloud Run."""
        return HealthResponse(status="healthy")

    app.include_router(oauth_router.router)
    return app


app = create_app()


# ============================================================================
# Main Entry Point
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host="0.0.0.0",
        port=get_relay_config().port,
        # Behind Heroku/Cloud Run: honour X-Forwarded-Proto for callback URLs
        proxy_headers=True,
        forwarded_allow_ips="*",
    )
