"""
Authorization code exchange against a provider's token endpoint.
"""

import logging
from typing import Any, Optional
from urllib.parse import parse_qsl

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ally.config import DEFAULT_HTTP_TIMEOUT
from ally.core.domain import AccessToken
from ally.core.exceptions import UpstreamHttpError
from ally.infrastructure.http_client import open_client


logger = logging.getLogger(__name__)


class TokenResponse(BaseModel):
    """
    Token endpoint response body.

    Providers such as GitHub answer 200 with an `error` field instead of a
    4xx status, so both shapes are accepted here and checked afterwards.
    """

    access_token: str | None = Field(default=None, repr=False)
    token_type: str | None = None
    scope: str | None = ""
    refresh_token: str | None = Field(default=None, repr=False)
    expires_in: int | None = None
    error: str | None = None
    error_description: str | None = None

    model_config = ConfigDict(extra="allow")


class TokenExchangeClient:
    """
    Exchanges an authorization code for an access token.

    Sends the standard authorization_code grant as a form POST and parses
    JSON or form-encoded responses.
    """

    def __init__(
        self,
        url: str,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
    ):
        self.url = url
        self.client_id = client_id
        self._client_secret = client_secret
        self.redirect_uri = redirect_uri
        self._http_client = http_client
        self._timeout = timeout

    async def exchange(self, code: str) -> AccessToken:
        """
        Exchange the authorization code.

        Args:
            code: Authorization code from the callback

        Returns:
            AccessToken with the granted scopes split out

        Raises:
            UpstreamHttpError: On non-2xx responses, network errors, unreadable
                bodies, provider errors or a missing access token
        """
        form = {
            "grant_type": "authorization_code",
            "client_id": self.client_id,
            "client_secret": self._client_secret,
            "redirect_uri": self.redirect_uri,
            "code": code,
        }

        logger.info("Exchanging authorization code", extra={"endpoint": self.url})

        try:
            async with open_client(self._http_client, self._timeout) as client:
                response = await client.post(
                    self.url, data=form, headers={"Accept": "application/json"}
                )
                response.raise_for_status()
                body = TokenResponse.model_validate(self._parse_body(response))
        except httpx.HTTPStatusError as e:
            logger.error(
                "Token endpoint returned an error status",
                extra={"endpoint": self.url, "status": e.response.status_code},
            )
            raise UpstreamHttpError(
                f"Token request to {self.url} failed with status {e.response.status_code}",
                upstream_status=e.response.status_code,
            ) from e
        except httpx.RequestError as e:
            logger.error(
                "Network error during token exchange",
                extra={"endpoint": self.url, "error": type(e).__name__},
            )
            raise UpstreamHttpError(
                f"Network error while calling {self.url}: {type(e).__name__}"
            ) from e
        except (ValidationError, ValueError) as e:
            raise UpstreamHttpError(
                f"Malformed token response from {self.url}"
            ) from e

        if body.error:
            logger.error(
                "Token endpoint rejected the authorization code",
                extra={"endpoint": self.url, "provider_error": body.error},
            )
            raise UpstreamHttpError(
                f"Token request to {self.url} was rejected: {body.error}"
                + (f" ({body.error_description})" if body.error_description else ""),
                upstream_status=response.status_code,
            )

        if not body.access_token:
            raise UpstreamHttpError(f"Token response from {self.url} has no access_token")

        return AccessToken.from_token_response(body.model_dump())

    @staticmethod
    def _parse_body(response: httpx.Response) -> dict[str, Any]:
        content_type = response.headers.get("content-type", "")
        if "application/x-www-form-urlencoded" in content_type or (
            "text/plain" in content_type
        ):
            return dict(parse_qsl(response.text))

        data = response.json()
        if not isinstance(data, dict):
            raise ValueError("Token response is not an object")
        return data
