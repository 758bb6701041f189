"""
Social login API endpoints.

- GET /{provider}/redirect - Start the OAuth2 flow
- GET /{provider}/callback - Handle the provider's callback, return the user

Persisting the user or opening a session is left to the application.
"""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse, Response

from ally.api.dependencies import Context, Driver


logger = logging.getLogger(__name__)

router = APIRouter(tags=["social"])


@router.get("/{provider}/redirect")
async def redirect(provider: str, ctx: Context, driver: Driver) -> Response:
    """
    Start the OAuth2 authorization flow.

    Redirects the user to the provider's authorization page with a fresh
    state stored in the state cookie.

    Args:
        provider: Provider name (github)
        ctx: Request/response context the driver writes to
        driver: Driver bound to ctx

    Returns:
        302 redirect carrying the state cookie
    """
    driver.redirect()
    return ctx.response


@router.get("/{provider}/callback")
async def callback(provider: str, ctx: Context, driver: Driver) -> Response:
    """
    Handle the provider's callback.

    Verifies error and state, exchanges the code, fetches the user.
    Failures are raised as OauthError and rendered by the exception handler.

    Args:
        provider: Provider name
        ctx: Request/response context
        driver: Driver bound to ctx

    Returns:
        The canonical user (without token) as JSON
    """
    user = await driver.get_user()

    logger.info(
        f"OAuth callback completed for provider: {provider}",
        extra={"provider": provider, "user_id": user.id},
    )

    response = JSONResponse(
        {
            "status": "success",
            "provider": provider,
            "user": user.to_public_dict(),
            "granted_scopes": getattr(user.token, "granted_scopes", []),
        }
    )
    return ctx.apply_cookies(response)
