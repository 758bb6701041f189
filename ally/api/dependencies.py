"""
FastAPI dependencies for the social login endpoints.

Provides dependency injection for the driver manager, the per-request
HTTP context and the provider driver.
"""

import logging
from typing import Annotated

from fastapi import Depends, Request

from ally.config import AllyConfig, get_ally_config
from ally.drivers.base import Oauth2Driver
from ally.infrastructure.http_context import StarletteHttpContext
from ally.manager import AllyManager


logger = logging.getLogger(__name__)


def get_manager(
    request: Request,
    config: Annotated[AllyConfig, Depends(get_ally_config)],
) -> AllyManager:
    """
    Provide the driver manager.

    Reuses the application's shared httpx client when the lifespan created one.
    """
    http_client = getattr(request.app.state, "http_client", None)
    return AllyManager(config, http_client=http_client)


def get_http_context(request: Request) -> StarletteHttpContext:
    """
    Provide the request/response context (one per request).

    The context is also kept on request.state so the error handler can send
    the cookies a failed callback queued (the consumed state cookie).
    """
    ctx = StarletteHttpContext(request)
    request.state.http_context = ctx
    return ctx


def get_driver(
    provider: str,
    ctx: Annotated[StarletteHttpContext, Depends(get_http_context)],
    manager: Annotated[AllyManager, Depends(get_manager)],
) -> Oauth2Driver:
    """
    Provide the driver for the provider in the path.

    Raises:
        UnknownProviderError: If provider is not supported
        ProviderNotConfiguredError: If provider has no credentials
    """
    return manager.use(provider, ctx)


# Type aliases for cleaner dependency injection
Context = Annotated[StarletteHttpContext, Depends(get_http_context)]
Driver = Annotated[Oauth2Driver, Depends(get_driver)]
