"""
Shared OAuth2 authorization-code driver.

Provider drivers subclass Oauth2Driver and fill in the endpoints, the
redirect builder and the profile normalization. Everything about the
callback (error detection, state verification, code exchange) lives here.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Generic, Optional, TypeVar

import httpx

from ally.config import DEFAULT_HTTP_TIMEOUT, DEFAULT_STATE_MAX_AGE
from ally.core.domain import AccessToken, CanonicalUser
from ally.core.exceptions import (
    AuthorizationDeniedError,
    MissingCodeError,
    StateMismatchError,
    UnsupportedGrantError,
)
from ally.core.ports import HttpContext
from ally.oauth.redirect import RedirectRequest
from ally.oauth.state import StateManager
from ally.oauth.token_exchange import TokenExchangeClient
from ally.oauth.user_request import UserRequest


logger = logging.getLogger(__name__)

RequestT = TypeVar("RequestT", bound=RedirectRequest)


class Oauth2Driver(ABC, Generic[RequestT]):
    """
    Base class for OAuth2 drivers.

    A driver instance is bound to one request context and must not be reused
    across requests.
    """

    provider: str = ""
    state_cookie_name: str = ""

    code_param = "code"
    error_param = "error"
    state_param = "state"

    # Error value providers send when the user cancels the authorization
    error_access_denied = "access_denied"
    error_unknown = "unknown_error"

    def __init__(
        self,
        ctx: HttpContext,
        http_client: Optional[httpx.AsyncClient] = None,
        state_max_age: int = DEFAULT_STATE_MAX_AGE,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
    ):
        self.ctx = ctx
        self.http_client = http_client
        self.timeout = timeout
        self.is_stateless = False
        self.state_manager = StateManager(
            self.state_cookie_name or f"{self.provider}_oauth_state",
            self.state_param,
            ctx,
            state_max_age,
        )

    @property
    @abstractmethod
    def access_token_url(self) -> str: ...

    @property
    @abstractmethod
    def client_id(self) -> str: ...

    @property
    @abstractmethod
    def client_secret(self) -> str: ...

    @property
    @abstractmethod
    def callback_url(self) -> str: ...

    @abstractmethod
    def new_redirect_request(self) -> RequestT:
        """Create the provider's authorization URL builder."""
        ...

    @abstractmethod
    async def get_user_for_token(
        self, token: str, callback: Optional[Callable[[UserRequest], None]] = None
    ) -> CanonicalUser:
        """Fetch and normalize the user for an existing access token."""
        ...

    def build_redirect_request(
        self, callback: Optional[Callable[[RequestT], None]] = None
    ) -> RequestT:
        redirect_request = self.new_redirect_request()
        if callback is not None:
            callback(redirect_request)
        return redirect_request

    def stateless(self):
        """Mark the authorization flow as stateless (no CSRF state)."""
        self.is_stateless = True
        return self

    def redirect(self, callback: Optional[Callable[[RequestT], None]] = None) -> None:
        """Redirect the user to the provider for authorizing the request."""
        redirect_request = self.build_redirect_request(callback)

        if not self.is_stateless:
            redirect_request.param(self.state_param, self.state_manager.set_state())

        logger.info(
            "Redirecting to provider",
            extra={"provider": self.provider, "stateless": self.is_stateless},
        )
        self.ctx.redirect(redirect_request.url())

    def get_redirect_url(
        self, callback: Optional[Callable[[RequestT], None]] = None
    ) -> str:
        """Build the authorization URL without redirecting. No state is embedded."""
        return self.build_redirect_request(callback).url()

    def has_code(self) -> bool:
        """Find if the callback request has the authorization code."""
        return bool(self.ctx.input(self.code_param))

    def get_error(self) -> Optional[str]:
        """
        Get the callback error.

        An explicit provider error wins; a missing code is reported as
        "unknown_error"; otherwise there is no error.
        """
        error = self.ctx.input(self.error_param)
        if error:
            return error

        if not self.has_code():
            return self.error_unknown

        return None

    def has_error(self) -> bool:
        return bool(self.get_error())

    def access_denied(self) -> bool:
        return self.get_error() == self.error_access_denied

    def state_mismatch(self) -> bool:
        """
        Find if the state is invalid. Always False for stateless flows.
        """
        if self.is_stateless:
            return False

        return self.state_manager.state_mismatch()

    async def get_access_token(self) -> AccessToken:
        """
        Exchange the authorization code for an access token.

        Must be called while handling the provider's callback.

        Raises:
            MissingCodeError: If the callback carries any error
            AuthorizationDeniedError: If that error is access_denied
            StateMismatchError: If the state does not verify
            UpstreamHttpError: If the token endpoint fails
        """
        error = self.get_error()
        if error:
            logger.warning(
                "Callback carries an error",
                extra={"provider": self.provider, "provider_error": error},
            )
            if error == self.error_access_denied:
                raise AuthorizationDeniedError(error)
            raise MissingCodeError(error)

        if self.state_mismatch():
            logger.warning("State mismatch on callback", extra={"provider": self.provider})
            raise StateMismatchError()

        client = TokenExchangeClient(
            self.access_token_url,
            client_id=self.client_id,
            client_secret=self.client_secret,
            redirect_uri=self.callback_url,
            http_client=self.http_client,
            timeout=self.timeout,
        )
        return await client.exchange(self.ctx.input(self.code_param) or "")

    async def get_user(
        self, callback: Optional[Callable[[UserRequest], None]] = None
    ) -> CanonicalUser:
        """Complete the callback: exchange the code, then fetch the user."""
        access_token = await self.get_access_token()

        user = await self.get_user_for_token(access_token.value, callback)
        user.token = access_token

        logger.info(
            "Authenticated user",
            extra={"provider": self.provider, "user_id": user.id},
        )
        return user

    async def get_user_for_token_and_secret(
        self,
        token: str,
        secret: str,
        callback: Optional[Callable[[Any], None]] = None,
    ) -> CanonicalUser:
        """
        OAuth 1.0 only. OAuth2 drivers always raise UnsupportedGrantError.
        """
        raise UnsupportedGrantError(
            f'Cannot use "get_user_for_token_and_secret" on the {self.provider} '
            'driver. Use "get_user_for_token" instead'
        )
