"""
Authorization URL builders.

A RedirectRequest collects the query parameters for one authorization
redirect. Callers may customize it through a callback before it is
serialized, e.g. to request extra scopes for a single login.
"""

from typing import Iterable

from authlib.common.urls import add_params_to_uri

from ally.config import GITHUB_AUTHORIZE_URL, GithubDriverConfig


class RedirectRequest:
    """
    Mutable builder for an OAuth2 authorization URL.

    All mutators return the builder so calls can be chained.
    """

    scope_separator = " "

    def __init__(self, base_url: str, client_id: str, redirect_uri: str):
        self.base_url = base_url
        self._params: dict[str, str] = {}
        self._scopes: list[str] = []
        self.param("client_id", client_id)
        self.param("redirect_uri", redirect_uri)

    def param(self, key: str, value: str) -> "RedirectRequest":
        """Set or override a query parameter."""
        self._params[key] = value
        return self

    def clear_param(self, key: str) -> "RedirectRequest":
        """Remove a query parameter."""
        self._params.pop(key, None)
        return self

    def get_params(self) -> dict[str, str]:
        """Return a copy of the query parameters, scope included."""
        params = dict(self._params)
        if self._scopes:
            params["scope"] = self.scope_separator.join(self._scopes)
        return params

    def scopes(self, scopes: Iterable[str]) -> "RedirectRequest":
        """Replace the requested scopes."""
        self._scopes = []
        return self.merge_scopes(scopes)

    def merge_scopes(self, scopes: Iterable[str]) -> "RedirectRequest":
        """Add scopes to the ones already requested, skipping duplicates."""
        for scope in scopes:
            if scope and scope not in self._scopes:
                self._scopes.append(scope)
        return self

    def clear_scopes(self) -> "RedirectRequest":
        """Request no scope at all."""
        self._scopes = []
        return self

    def url(self) -> str:
        """Serialize to the fully-qualified authorization URL."""
        return add_params_to_uri(self.base_url, list(self.get_params().items()))

    def __str__(self) -> str:
        return self.url()


class GithubRedirectRequest(RedirectRequest):
    """Authorization URL builder with the GitHub specific parameters."""

    def __init__(self, config: GithubDriverConfig):
        super().__init__(
            config.authorize_url or GITHUB_AUTHORIZE_URL,
            config.client_id,
            config.callback_url,
        )
        self.scopes(config.scopes)
        if config.login:
            self.login(config.login)
        if config.allow_signup is not None:
            self.allow_signup(config.allow_signup)

    def login(self, username: str) -> "GithubRedirectRequest":
        """Suggest a specific account to sign in with."""
        self.param("login", username)
        return self

    def allow_signup(self, allow: bool = True) -> "GithubRedirectRequest":
        """Whether unauthenticated users are offered to sign up during the flow."""
        self.param("allow_signup", "true" if allow else "false")
        return self
