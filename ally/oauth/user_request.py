"""
Configurable GET request against a provider API.

Drivers build one UserRequest per API call and hand it to the caller's
callback before sending, so extra headers or query parameters can be added
for a single call without subclassing the driver.
"""

import logging
from typing import Any, Optional

import httpx

from ally.config import DEFAULT_HTTP_TIMEOUT
from ally.core.exceptions import UpstreamHttpError
from ally.infrastructure.http_client import open_client


logger = logging.getLogger(__name__)


class UserRequest:
    """Mutable builder for an authenticated provider API request."""

    def __init__(self, url: str):
        self.url = url
        self.headers: dict[str, str] = {}
        self.params: dict[str, str] = {}

    def header(self, key: str, value: str) -> "UserRequest":
        """Set or override a request header."""
        self.headers[key] = value
        return self

    def clear_header(self, key: str) -> "UserRequest":
        """Remove a request header."""
        self.headers.pop(key, None)
        return self

    def param(self, key: str, value: str) -> "UserRequest":
        """Set or override a query parameter."""
        self.params[key] = value
        return self

    async def get(
        self,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
    ) -> Any:
        """
        Send the request and decode the JSON body.

        Args:
            http_client: Shared client, or None to open one for this call
            timeout: Timeout for a client opened here

        Returns:
            Decoded JSON body

        Raises:
            UpstreamHttpError: On non-2xx responses, network errors or
                bodies that are not JSON
        """
        try:
            async with open_client(http_client, timeout) as client:
                response = await client.get(
                    self.url, headers=self.headers, params=self.params
                )
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError as e:
            logger.error(
                "Provider API returned an error status",
                extra={"endpoint": self.url, "status": e.response.status_code},
            )
            raise UpstreamHttpError(
                f"Request to {self.url} failed with status {e.response.status_code}",
                upstream_status=e.response.status_code,
            ) from e
        except httpx.RequestError as e:
            logger.error(
                "Network error calling provider API",
                extra={"endpoint": self.url, "error": type(e).__name__},
            )
            raise UpstreamHttpError(
                f"Network error while calling {self.url}: {type(e).__name__}"
            ) from e
        except ValueError as e:
            raise UpstreamHttpError(f"Response from {self.url} is not valid JSON") from e
