"""
Shared test configuration and fixtures.
"""

import os
from typing import Optional
from unittest.mock import patch

import pytest
from cryptography.fernet import Fernet

from ally.config import GithubDriverConfig, get_ally_config
from ally.infrastructure.encryption import reset_encryption

TEST_COOKIE_SECRET = Fernet.generate_key().decode()

TEST_ENV = {
    "BASE_URL": "http://testserver",
    "GITHUB_CLIENT_ID": "test-github-id",
    "GITHUB_CLIENT_SECRET": "test-github-secret",
    "ALLY_COOKIE_SECRET": TEST_COOKIE_SECRET,
}


class FakeHttpContext:
    """In-memory HttpContext recording what a driver writes to the response."""

    def __init__(
        self,
        query: Optional[dict[str, str]] = None,
        cookies: Optional[dict[str, str]] = None,
    ):
        self.query = query or {}
        self.cookies = cookies or {}
        self.set_cookies: dict[str, str] = {}
        self.cleared_cookies: list[str] = []
        self.redirected_to: Optional[str] = None

    def input(self, name: str) -> Optional[str]:
        return self.query.get(name)

    def get_cookie(self, name: str) -> Optional[str]:
        return self.cookies.get(name)

    def set_cookie(self, name: str, value: str, max_age: int) -> None:
        self.set_cookies[name] = value

    def clear_cookie(self, name: str) -> None:
        self.cleared_cookies.append(name)

    def redirect(self, url: str) -> None:
        self.redirected_to = url


@pytest.fixture(autouse=True)
def ally_env():
    """
    Provide a complete test environment for every test.

    Clears the config and cipher singletons so each test sees TEST_ENV.
    """
    with patch.dict(os.environ, TEST_ENV):
        get_ally_config.cache_clear()
        reset_encryption()
        yield
    get_ally_config.cache_clear()
    reset_encryption()


@pytest.fixture
def github_config():
    """GitHub driver config matching the end-to-end example."""
    return GithubDriverConfig(
        client_id="abc",
        client_secret="shh-secret",
        callback_url="https://app/cb",
    )


@pytest.fixture
def sample_github_user():
    """Sample GitHub /user payload."""
    return {
        "login": "octocat",
        "id": 583231,
        "avatar_url": "https://avatars.githubusercontent.com/u/583231?v=4",
        "name": "The Octocat",
        "email": None,
        "company": "@github",
    }


@pytest.fixture
def sample_github_emails():
    """Sample GitHub /user/emails payload."""
    return [
        {"email": "octo@users.noreply.github.com", "primary": False, "verified": True},
        {"email": "octocat@github.com", "primary": True, "verified": True},
    ]
