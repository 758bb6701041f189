"""
Tests for the driver manager.
"""

from unittest.mock import MagicMock

import httpx
import pytest

from ally.config import AllyConfig
from ally.core.exceptions import ProviderNotConfiguredError, UnknownProviderError
from ally.drivers.github import GithubDriver
from ally.manager import AllyManager
from tests.conftest import FakeHttpContext


@pytest.fixture
def configured():
    return AllyConfig(
        base_url="https://example.com",
        github_client_id="id",
        github_client_secret="secret",
        state_max_age=120,
        http_timeout=3.0,
    )


class TestAllyManager:
    """Tests for AllyManager.use."""

    def test_use_github(self, configured):
        ctx = FakeHttpContext()

        driver = AllyManager(configured).use("github", ctx)

        assert isinstance(driver, GithubDriver)
        assert driver.ctx is ctx
        assert driver.callback_url == "https://example.com/github/callback"
        assert driver.timeout == 3.0
        assert driver.state_manager.max_age == 120

    def test_use_shares_http_client(self, configured):
        shared = MagicMock(spec=httpx.AsyncClient)

        driver = AllyManager(configured, http_client=shared).use(
            "github", FakeHttpContext()
        )

        assert driver.http_client is shared

    def test_each_use_builds_a_new_driver(self, configured):
        manager = AllyManager(configured)

        first = manager.use("github", FakeHttpContext())
        second = manager.use("github", FakeHttpContext())

        assert first is not second

    def test_unknown_provider(self, configured):
        with pytest.raises(UnknownProviderError, match="Unknown provider: gitlab"):
            AllyManager(configured).use("gitlab", FakeHttpContext())

    def test_provider_not_configured(self):
        config = AllyConfig("https://example.com", None, None)

        with pytest.raises(ProviderNotConfiguredError):
            AllyManager(config).use("github", FakeHttpContext())

    def test_configured_providers(self, configured):
        assert AllyManager(configured).configured_providers() == ["github"]
