"""
Driver registry.

Builds a provider driver bound to one request context from the application
configuration. This is the entry point web handlers use:

    driver = manager.use("github", ctx)
"""

import logging
from typing import Callable, Optional

import httpx

from ally.config import AllyConfig, SUPPORTED_PROVIDERS
from ally.core.exceptions import ProviderNotConfiguredError, UnknownProviderError
from ally.core.ports import HttpContext
from ally.drivers.base import Oauth2Driver
from ally.drivers.github import GithubDriver


logger = logging.getLogger(__name__)


class AllyManager:
    """
    Creates drivers for the configured providers.

    A shared httpx.AsyncClient may be passed in; drivers then reuse its
    connection pool and timeouts.
    """

    def __init__(
        self, config: AllyConfig, http_client: Optional[httpx.AsyncClient] = None
    ):
        self.config = config
        self.http_client = http_client
        self._factories: dict[str, Callable[[HttpContext], Oauth2Driver]] = {
            "github": self._make_github,
        }

    def _make_github(self, ctx: HttpContext) -> GithubDriver:
        return GithubDriver(
            self.config.github_driver_config(),
            ctx,
            http_client=self.http_client,
            state_max_age=self.config.state_max_age,
            timeout=self.config.http_timeout,
        )

    def configured_providers(self) -> list[str]:
        return self.config.get_configured_providers()

    def use(self, provider: str, ctx: HttpContext) -> Oauth2Driver:
        """
        Get a driver for provider bound to ctx.

        Raises:
            UnknownProviderError: If provider is not supported
            ProviderNotConfiguredError: If provider has no credentials
        """
        if provider not in SUPPORTED_PROVIDERS:
            raise UnknownProviderError(
                f"Unknown provider: {provider}. Supported: {SUPPORTED_PROVIDERS}"
            )

        if not self.config.is_provider_configured(provider):
            raise ProviderNotConfiguredError(f"Provider '{provider}' is not configured")

        return self._factories[provider](ctx)
