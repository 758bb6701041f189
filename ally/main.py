"""
FastAPI application exposing social login through the OAuth2 drivers.

This module wires dependencies and configures the application.
Driver logic is in ally/drivers and ally/oauth, adapters in ally/infrastructure.
"""

import logging
import os
from contextlib import asynccontextmanager
from datetime import UTC, datetime

# Configure logging FIRST, before other local imports
from ally.logging_config import setup_global_logging

setup_global_logging()

# Now import other modules (they will use the configured logging)
import httpx  # noqa: E402
from fastapi import FastAPI, Request  # noqa: E402
from fastapi.responses import JSONResponse  # noqa: E402

from ally.api import social  # noqa: E402
from ally.config import get_ally_config  # noqa: E402
from ally.core.exceptions import OauthError, UpstreamHttpError  # noqa: E402

logger = logging.getLogger(__name__)


# ============================================================================
# Application Lifecycle
# ============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Opens one shared httpx client for all provider calls and closes it on
    shutdown. Its timeout applies to every token, user and email request.
    """
    config = get_ally_config()
    logger.info(
        "Application starting up...",
        extra={"providers": config.get_configured_providers()},
    )
    async with httpx.AsyncClient(timeout=config.http_timeout) as client:
        app.state.http_client = client
        yield
    app.state.http_client = None
    logger.info("Shutting down application...")


app = FastAPI(
    title="Ally",
    description="Social login through OAuth2 provider drivers",
    version="1.0.0",
    lifespan=lifespan,
)


# ============================================================================
# Centralized Exception Handlers
# ============================================================================


@app.exception_handler(OauthError)
async def oauth_error_handler(request: Request, exc: OauthError):
    """
    Render driver failures.

    Each error class carries its own status code: 400 for a missing code or
    state mismatch (the user should retry the login), 403 for denied access,
    502 for provider failures, 404/503 for unknown or unconfigured providers.
    Cookies the driver queued before failing are sent with the error.
    """
    if isinstance(exc, UpstreamHttpError):
        logger.error(f"Provider error: {exc.message}", extra={"code": exc.code})
    else:
        logger.warning(f"OAuth flow failed: {exc.message}", extra={"code": exc.code})

    response = JSONResponse(
        status_code=exc.status_code,
        content={
            "status": "error",
            "code": exc.code,
            "message": exc.message,
        },
    )

    # A verified state is spent even when the callback fails afterwards
    ctx = getattr(request.state, "http_context", None)
    if ctx is not None:
        ctx.apply_cookies(response)
    return response


# ============================================================================
# Health Check Endpoints
# ============================================================================


@app.get("/")
async def root():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "ally",
        "timestamp": datetime.now(UTC).isoformat(),
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


# ============================================================================
# Include Routers
# ============================================================================

app.include_router(social.router)


# ============================================================================
# Main Entry Point
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", 8080))
    uvicorn.run(app, host="0.0.0.0", port=port)
