"""
Core domain models for authenticated users and access tokens.

These models are provider independent. Drivers translate provider payloads
into them; callers persist them (or not) however they like.
"""

from datetime import datetime, timedelta, UTC
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class EmailVerificationState(str, Enum):
    """Whether the provider vouches for the canonical email."""

    VERIFIED = "verified"
    UNVERIFIED = "unverified"


class AccessToken(BaseModel):
    """
    OAuth2 access token obtained by exchanging an authorization code.

    The token value is kept out of repr() so it never leaks into logs.
    """

    value: str = Field(repr=False, description="OAuth2 access token")
    granted_scopes: list[str] = Field(
        default_factory=list, description="Scopes granted by the provider"
    )
    token_type: str = Field(default="bearer", description="Token type")
    refresh_token: str | None = Field(
        default=None, repr=False, description="Refresh token, when issued"
    )
    expires_at: datetime | None = Field(
        default=None, description="Expiry time, when the provider sends expires_in"
    )

    @classmethod
    def from_token_response(cls, token_data: dict[str, Any]) -> "AccessToken":
        """
        Map a raw token endpoint body to an AccessToken.

        The scope string is split on whitespace, preserving order.

        Args:
            token_data: Parsed token endpoint response

        Returns:
            AccessToken instance
        """
        expires_in = token_data.get("expires_in")
        expires_at = None
        if expires_in:
            expires_at = datetime.now(UTC) + timedelta(seconds=int(expires_in))

        return cls(
            value=token_data["access_token"],
            granted_scopes=(token_data.get("scope") or "").split(),
            token_type=token_data.get("token_type") or "bearer",
            refresh_token=token_data.get("refresh_token"),
            expires_at=expires_at,
        )


class UserToken(BaseModel):
    """Token reference attached to a user fetched with a pre-existing token."""

    value: str = Field(repr=False)


class CanonicalUser(BaseModel):
    """
    Provider independent user profile.

    `original` keeps the full raw provider payload so callers can read
    fields the canonical schema does not cover.
    """

    id: str | int
    nick_name: str | None = None
    name: str | None = None
    email: str | None = None
    avatar_url: str | None = None
    email_verification_state: EmailVerificationState = EmailVerificationState.UNVERIFIED
    token: AccessToken | UserToken
    original: dict[str, Any] = Field(default_factory=dict, repr=False)

    def to_public_dict(self) -> dict[str, Any]:
        """Serialize without the token value, for rendering in responses."""
        return self.model_dump(mode="json", exclude={"token", "original"})
