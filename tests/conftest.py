"""Shared fixtures for webdev_mcp.

All tests replace Playwright with fakes: no real browser is launched.
"""
from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest

from tests.helpers import FakeEnv
from webdev_mcp.browser_manager import BrowserManager
from webdev_mcp.config import BrowserConfig


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def pw_env():
    """Patch async_playwright so launch() receives the fake driver."""
    env = FakeEnv()
    with patch("webdev_mcp.browser_manager.async_playwright") as mock_ap:
        mock_ap.return_value.start = AsyncMock(return_value=env.playwright)
        env.async_playwright = mock_ap
        yield env


@pytest.fixture()
def browser_config():
    return BrowserConfig(
        browser_type="chromium",
        headless=True,
        session_type="fresh",
        navigation_settle_ms=0,
        action_settle_ms=0,
        console_settle_ms=0,
    )


@pytest.fixture()
def manager(pw_env, browser_config):
    return BrowserManager(browser_config)
