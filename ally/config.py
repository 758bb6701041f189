"""
Driver configuration and provider settings.

Loaded from environment variables. Each provider (GitHub, etc.) can be
configured independently; providers without credentials are skipped.
"""

import os
import logging
from dataclasses import dataclass, field
from functools import lru_cache


logger = logging.getLogger(__name__)


# GitHub OAuth2 endpoints
GITHUB_AUTHORIZE_URL = "https://github.com/login/oauth/authorize"
GITHUB_ACCESS_TOKEN_URL = "https://github.com/login/oauth/access_token"
GITHUB_USER_INFO_URL = "https://api.github.com/user"
GITHUB_USER_EMAIL_URL = "https://api.github.com/user/emails"

# Default scopes requested when the config does not set any
GITHUB_DEFAULT_SCOPES = ("user",)

# State cookie lifetime: 10 minutes (in seconds)
DEFAULT_STATE_MAX_AGE = 60 * 10

DEFAULT_HTTP_TIMEOUT = 10.0


@dataclass(frozen=True)
class GithubDriverConfig:
    """
    Static credentials and endpoints for the GitHub driver.

    Endpoint fields left as None fall back to the documented GitHub URLs.
    """

    client_id: str
    client_secret: str = field(repr=False)
    callback_url: str
    scopes: tuple[str, ...] = GITHUB_DEFAULT_SCOPES
    login: str | None = None
    allow_signup: bool | None = None
    authorize_url: str | None = None
    access_token_url: str | None = None
    user_info_url: str | None = None
    user_email_url: str | None = None


@dataclass
class AllyConfig:
    """
    Application-wide OAuth settings.

    Loaded from environment variables. Missing credentials or cookie key are
    reported when the singleton is first built.
    """

    base_url: str
    github_client_id: str | None
    github_client_secret: str | None = field(repr=False)
    github_scopes: tuple[str, ...] = GITHUB_DEFAULT_SCOPES
    cookie_secret: str | None = field(default=None, repr=False)
    state_max_age: int = DEFAULT_STATE_MAX_AGE
    http_timeout: float = DEFAULT_HTTP_TIMEOUT

    @classmethod
    def from_env(cls) -> "AllyConfig":
        """Load configuration from environment variables."""
        scopes = os.getenv("GITHUB_SCOPES")
        return cls(
            base_url=os.getenv("BASE_URL", ""),
            github_client_id=os.getenv("GITHUB_CLIENT_ID"),
            github_client_secret=os.getenv("GITHUB_CLIENT_SECRET"),
            github_scopes=tuple(scopes.split()) if scopes else GITHUB_DEFAULT_SCOPES,
            cookie_secret=os.getenv("ALLY_COOKIE_SECRET"),
            state_max_age=int(os.getenv("ALLY_STATE_MAX_AGE", DEFAULT_STATE_MAX_AGE)),
            http_timeout=float(os.getenv("ALLY_HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT)),
        )

    def get_callback_url(self, provider: str) -> str:
        """Generate callback URL for a provider."""
        return f"{self.base_url}/{provider}/callback"

    def is_provider_configured(self, provider: str) -> bool:
        """Check if a provider has valid credentials configured."""
        if provider == "github":
            return bool(self.github_client_id and self.github_client_secret)
        return False

    def get_configured_providers(self) -> list[str]:
        """List all providers with valid configuration."""
        return [p for p in SUPPORTED_PROVIDERS if self.is_provider_configured(p)]

    def github_driver_config(self) -> GithubDriverConfig:
        """
        Build the GitHub driver config.

        Raises:
            ValueError: If GitHub credentials are missing
        """
        if not self.is_provider_configured("github"):
            raise ValueError("GITHUB_CLIENT_ID and GITHUB_CLIENT_SECRET are required")

        return GithubDriverConfig(
            client_id=self.github_client_id or "",
            client_secret=self.github_client_secret or "",
            callback_url=self.get_callback_url("github"),
            scopes=self.github_scopes,
        )


@lru_cache()
def get_ally_config() -> AllyConfig:
    """Get OAuth configuration singleton."""
    config = AllyConfig.from_env()
    if not config.get_configured_providers():
        logger.warning("No OAuth provider configured (missing credentials)")
    if not config.cookie_secret:
        logger.warning(
            "ALLY_COOKIE_SECRET is not set; stateful redirects will fail until it is"
        )
    return config


# List of supported providers (for validation)
SUPPORTED_PROVIDERS = ["github"]
