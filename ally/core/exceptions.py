"""
Domain exceptions for the OAuth driver protocol.

Every failure the drivers surface is an OauthError subclass carrying a stable
machine-readable code and the HTTP status a web layer should answer with.
They are caught by the centralized exception handler in ally/main.py.

Messages never contain client secrets or access token values.
"""


class OauthError(Exception):
    """Base exception for all OAuth driver failures."""

    code = "E_OAUTH"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class MissingCodeError(OauthError):
    """
    Raised when the callback has no usable authorization code.

    Covers every callback that carries an error, including the generic
    "unknown_error" inferred from an absent code.
    """

    code = "E_OAUTH_MISSING_CODE"
    status_code = 400

    def __init__(self, error: str | None = None):
        super().__init__(
            "Redirect request is missing the authorization code"
            + (f" (provider error: {error})" if error else "")
        )
        self.error = error


class AuthorizationDeniedError(MissingCodeError):
    """Raised when the user (or provider) denied the authorization request."""

    code = "E_OAUTH_ACCESS_DENIED"
    status_code = 403


class StateMismatchError(OauthError):
    """
    Raised when the anti-CSRF state does not match.

    Happens when cookies are disabled, the state cookie expired, or the
    callback was not initiated by this server.
    """

    code = "E_OAUTH_STATE_MISMATCH"
    status_code = 400

    def __init__(self):
        super().__init__("Unable to verify re-redirect state")


class UnsupportedGrantError(OauthError):
    """Raised when a capability is invoked on a driver that does not implement it."""

    code = "E_OAUTH_UNSUPPORTED_GRANT"
    status_code = 501


class UpstreamHttpError(OauthError):
    """
    Raised for provider failures: non-success responses, malformed payloads
    and network errors from the token, user or email endpoints.
    """

    code = "E_OAUTH_UPSTREAM"
    status_code = 502

    def __init__(self, message: str, upstream_status: int | None = None):
        super().__init__(message)
        self.upstream_status = upstream_status


class UnknownProviderError(OauthError):
    """Raised when a driver is requested for a provider that does not exist."""

    code = "E_OAUTH_UNKNOWN_PROVIDER"
    status_code = 404


class ProviderNotConfiguredError(OauthError):
    """Raised when a provider lacks credentials or the state cookie key."""

    code = "E_OAUTH_PROVIDER_NOT_CONFIGURED"
    status_code = 503
