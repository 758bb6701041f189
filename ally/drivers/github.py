"""
GitHub driver for connecting user accounts through GitHub OAuth apps.

GitHub only exposes the public email on /user, so the verified address is
looked up on /user/emails.
"""

import asyncio
import logging
from typing import Any, Callable, Optional

import httpx
from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError

from ally.config import (
    DEFAULT_HTTP_TIMEOUT,
    DEFAULT_STATE_MAX_AGE,
    GITHUB_ACCESS_TOKEN_URL,
    GITHUB_USER_EMAIL_URL,
    GITHUB_USER_INFO_URL,
    GithubDriverConfig,
)
from ally.core.domain import CanonicalUser, EmailVerificationState, UserToken
from ally.core.exceptions import UpstreamHttpError
from ally.core.ports import HttpContext
from ally.drivers.base import Oauth2Driver
from ally.oauth.redirect import GithubRedirectRequest
from ally.oauth.user_request import UserRequest


logger = logging.getLogger(__name__)


class GithubProfile(BaseModel):
    """The subset of the GitHub /user payload the canonical user needs."""

    id: int | str
    login: str | None = None
    name: str | None = None
    avatar_url: str | None = None

    model_config = ConfigDict(extra="allow")


class GithubEmail(BaseModel):
    """One entry of the GitHub /user/emails list."""

    email: str
    primary: bool = False
    verified: bool = False

    model_config = ConfigDict(extra="allow")


_email_list = TypeAdapter(list[GithubEmail])


def sort_emails(emails: list[GithubEmail]) -> list[GithubEmail]:
    """Primary addresses first, otherwise keeping the provider's order."""
    return sorted(emails, key=lambda email: not email.primary)


def select_email(emails: list[GithubEmail]) -> Optional[GithubEmail]:
    """
    Pick the canonical email.

    The first verified address after sorting primary ones to the top; when
    none is verified, the first address of the sorted list.
    """
    ordered = sort_emails(emails)
    for email in ordered:
        if email.verified:
            return email
    return ordered[0] if ordered else None


class GithubDriver(Oauth2Driver[GithubRedirectRequest]):
    """
    Github driver to interact with the Github APIs for connecting
    user accounts.
    """

    provider = "github"
    state_cookie_name = "gh_oauth_state"

    def __init__(
        self,
        config: GithubDriverConfig,
        ctx: HttpContext,
        http_client: Optional[httpx.AsyncClient] = None,
        state_max_age: int = DEFAULT_STATE_MAX_AGE,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
    ):
        self.config = config
        super().__init__(
            ctx, http_client=http_client, state_max_age=state_max_age, timeout=timeout
        )

    @property
    def access_token_url(self) -> str:
        return self.config.access_token_url or GITHUB_ACCESS_TOKEN_URL

    @property
    def client_id(self) -> str:
        return self.config.client_id

    @property
    def client_secret(self) -> str:
        return self.config.client_secret

    @property
    def callback_url(self) -> str:
        return self.config.callback_url

    def new_redirect_request(self) -> GithubRedirectRequest:
        return GithubRedirectRequest(self.config)

    def _api_request(self, url: str, token: str) -> UserRequest:
        request = UserRequest(url)
        request.header("Authorization", f"token {token}")
        request.header("Accept", "application/json")
        return request

    async def get_user_for_token(
        self, token: str, callback: Optional[Callable[[UserRequest], None]] = None
    ) -> CanonicalUser:
        """
        Fetch the user for a pre-existing access token.

        The callback can configure the /user request before it is sent.
        """
        request = self._api_request(
            self.config.user_info_url or GITHUB_USER_INFO_URL, token
        )
        if callback is not None:
            callback(request)

        email_request = self._api_request(
            self.config.user_email_url or GITHUB_USER_EMAIL_URL, token
        )

        # Both calls only need the token; wait for both before failing
        results = await asyncio.gather(
            request.get(self.http_client, self.timeout),
            email_request.get(self.http_client, self.timeout),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result

        body, emails_body = results
        return self._to_canonical_user(body, emails_body, token)

    def _to_canonical_user(
        self, body: Any, emails_body: Any, token: str
    ) -> CanonicalUser:
        try:
            profile = GithubProfile.model_validate(body)
            emails = sort_emails(_email_list.validate_python(emails_body))
        except ValidationError as e:
            logger.error(
                "Unexpected GitHub user payload",
                extra={"provider": self.provider, "errors": e.error_count()},
            )
            raise UpstreamHttpError(
                f"Malformed GitHub user payload: {e.error_count()} errors"
            ) from e

        main_email = select_email(emails)
        original = dict(body)
        original["emails"] = [email.model_dump() for email in emails]

        return CanonicalUser(
            id=profile.id,
            nick_name=profile.login or profile.name,
            name=profile.name,
            email=main_email.email if main_email else None,
            avatar_url=profile.avatar_url,
            email_verification_state=(
                EmailVerificationState.VERIFIED
                if main_email and main_email.verified
                else EmailVerificationState.UNVERIFIED
            ),
            token=UserToken(value=token),
            original=original,
        )
