"""
Starlette adapter for the HttpContext port.

Wraps one inbound starlette Request and the Response that will be sent back.
Drivers write cookies and redirects onto `response`; the route handler
returns it.
"""

from typing import Optional

from starlette.requests import Request
from starlette.responses import Response


class StarletteHttpContext:
    """HttpContext implementation over a Starlette request/response pair."""

    def __init__(self, request: Request, response: Optional[Response] = None):
        self.request = request
        self.response = response if response is not None else Response()

    def input(self, name: str) -> Optional[str]:
        return self.request.query_params.get(name)

    def get_cookie(self, name: str) -> Optional[str]:
        return self.request.cookies.get(name)

    def set_cookie(self, name: str, value: str, max_age: int) -> None:
        self.response.set_cookie(
            name,
            value,
            max_age=max_age,
            httponly=True,
            samesite="lax",
            secure=self.request.url.scheme == "https",
        )

    def clear_cookie(self, name: str) -> None:
        self.response.delete_cookie(name, httponly=True, samesite="lax")

    def redirect(self, url: str) -> None:
        self.response.status_code = 302
        self.response.headers["location"] = url

    def apply_cookies(self, response: Response) -> Response:
        """Copy the queued Set-Cookie headers onto another response."""
        for key, value in self.response.raw_headers:
            if key == b"set-cookie":
                response.raw_headers.append((key, value))
        return response
