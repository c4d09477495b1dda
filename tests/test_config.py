"""Tests for webdev_mcp.config."""
from __future__ import annotations

from pathlib import Path

import pytest

from webdev_mcp.config import BrowserConfig, ServerConfig, default_chrome_user_data_dir


class TestBrowserConfig:
    def test_defaults(self):
        config = BrowserConfig.from_env({})

        assert config.browser_type == "chrome"
        assert config.channel == "chrome"
        assert config.headless is False
        assert config.session_type == "existing"
        assert config.user_data_dir is None
        assert config.navigation_settle_ms == 1000
        assert config.action_settle_ms == 1000

    def test_from_env(self):
        config = BrowserConfig.from_env({
            "BROWSER_TYPE": "chromium",
            "HEADLESS": "TRUE",
            "SESSION_TYPE": "fresh",
            "USER_DATA_DIR": "/tmp/profile",
            "NAVIGATION_SETTLE_MS": "250",
        })

        assert config.channel is None
        assert config.headless is True
        assert config.session_type == "fresh"
        assert config.user_data_dir == "/tmp/profile"
        assert config.navigation_settle_ms == 250

    def test_headless_requires_literal_true(self):
        assert BrowserConfig.from_env({"HEADLESS": "1"}).headless is False

    def test_rejects_unknown_values(self):
        with pytest.raises(ValueError, match="Unsupported browser type"):
            BrowserConfig.from_env({"BROWSER_TYPE": "firefox"})
        with pytest.raises(ValueError, match="Unsupported session type"):
            BrowserConfig(session_type="shared")
        with pytest.raises(ValueError, match="ACTION_SETTLE_MS must be an integer"):
            BrowserConfig.from_env({"ACTION_SETTLE_MS": "soon"})


class TestServerConfig:
    def test_from_env(self):
        config = ServerConfig.from_env({
            "MCP_TRANSPORT": "sse",
            "MCP_HOST": "0.0.0.0",
            "MCP_PORT": "9000",
            "LOG_LEVEL": "debug",
        })

        assert config == ServerConfig(transport="sse", host="0.0.0.0", port=9000, log_level="DEBUG")

    def test_defaults(self):
        assert ServerConfig.from_env({}) == ServerConfig()


class TestDefaultChromeUserDataDir:
    home = Path("/home/me")

    def test_macos(self):
        assert default_chrome_user_data_dir("darwin", self.home, {}) == str(
            self.home / "Library" / "Application Support" / "Google" / "Chrome"
        )

    def test_linux(self):
        assert default_chrome_user_data_dir("linux", self.home, {}) == str(
            self.home / ".config" / "google-chrome"
        )

    def test_windows_uses_local_app_data(self):
        result = default_chrome_user_data_dir("win32", self.home, {"LOCALAPPDATA": "/appdata"})

        assert result == str(Path("/appdata") / "Google" / "Chrome" / "User Data")

    def test_windows_fallback(self):
        result = default_chrome_user_data_dir("win32", self.home, {})

        assert result == str(self.home / "AppData" / "Local" / "Google" / "Chrome" / "User Data")

    def test_unsupported_platform(self):
        assert default_chrome_user_data_dir("sunos5", self.home, {}) is None
