"""
Port definitions (interfaces) for the driver core.

The drivers never touch the web framework directly. They read the inbound
request and write the outbound response through HttpContext, which is
implemented by infrastructure adapters (e.g. StarletteHttpContext).

The driver contracts are split by protocol family: OAuth2 drivers implement
Oauth2DriverContract, OAuth1 drivers implement Oauth1DriverContract. Code that
only needs one family should depend on that protocol.
"""

from typing import Any, Callable, Optional, Protocol, runtime_checkable

from ally.core.domain import AccessToken, CanonicalUser


class HttpContext(Protocol):
    """
    Port (interface) for the request/response pair of one HTTP exchange.

    One context is bound to exactly one inbound request.
    """

    def input(self, name: str) -> Optional[str]:
        """Read a query string parameter from the inbound request."""
        ...

    def get_cookie(self, name: str) -> Optional[str]:
        """Read a cookie from the inbound request."""
        ...

    def set_cookie(self, name: str, value: str, max_age: int) -> None:
        """Queue a cookie on the outbound response."""
        ...

    def clear_cookie(self, name: str) -> None:
        """Queue a cookie deletion on the outbound response."""
        ...

    def redirect(self, url: str) -> None:
        """Turn the outbound response into a redirect to url."""
        ...


@runtime_checkable
class Oauth2DriverContract(Protocol):
    """Contract for drivers speaking the OAuth2 authorization-code grant."""

    def stateless(self) -> "Oauth2DriverContract": ...

    def redirect(self, callback: Optional[Callable[[Any], None]] = None) -> None: ...

    def get_redirect_url(
        self, callback: Optional[Callable[[Any], None]] = None
    ) -> str: ...

    def has_code(self) -> bool: ...

    def get_error(self) -> Optional[str]: ...

    def has_error(self) -> bool: ...

    def access_denied(self) -> bool: ...

    def state_mismatch(self) -> bool: ...

    async def get_access_token(self) -> AccessToken: ...

    async def get_user(
        self, callback: Optional[Callable[[Any], None]] = None
    ) -> CanonicalUser: ...

    async def get_user_for_token(
        self, token: str, callback: Optional[Callable[[Any], None]] = None
    ) -> CanonicalUser: ...


@runtime_checkable
class Oauth1DriverContract(Protocol):
    """Contract for drivers speaking OAuth 1.0a (token + secret pairs)."""

    async def get_user_for_token_and_secret(
        self,
        token: str,
        secret: str,
        callback: Optional[Callable[[Any], None]] = None,
    ) -> CanonicalUser: ...
