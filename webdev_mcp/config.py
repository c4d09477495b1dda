"""
配置常量与环境变量配置
"""
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

# 服务器配置（SSE 传输）
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 3334
DEFAULT_TRANSPORT = "stdio"
SERVER_NAME = "webdev-mcp"
SERVER_VERSION = "1.0.0"

# 浏览器启动
BROWSER_TYPES = ("chrome", "chromium")
SESSION_TYPES = ("existing", "fresh")
LAUNCH_TIMEOUT_MS = 5000

# 导航状态
NAVIGATION_WAIT_TIMEOUT_MS = 10_000

# 稳定等待（页面加载、点击/提交之后给异步脚本留出执行时间）
NAVIGATION_SETTLE_MS = 1000
ACTION_SETTLE_MS = 1000
CONSOLE_SETTLE_MS = 500

# 网络记录
BODY_METHODS = ("POST", "PUT", "PATCH")
TEXTUAL_CONTENT_TYPES = ("json", "text", "html", "xml")
RESPONSE_BODY_PREVIEW_CHARS = 5000

# 日志
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DEFAULT_LOG_LEVEL = "INFO"


def _env_int(environ: Mapping[str, str], name: str, default: int) -> int:
    value = environ.get(name)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}")


def default_chrome_user_data_dir(
    platform_name: Optional[str] = None,
    home: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Optional[str]:
    """返回当前平台 Chrome 默认用户数据目录，不支持的平台返回 None"""
    platform_name = platform_name or sys.platform
    home = home or Path.home()
    environ = os.environ if environ is None else environ

    if platform_name == "darwin":
        return str(home / "Library" / "Application Support" / "Google" / "Chrome")

    if platform_name.startswith("linux"):
        return str(home / ".config" / "google-chrome")

    if platform_name == "win32":
        local_app_data = environ.get("LOCALAPPDATA") or str(home / "AppData" / "Local")
        return str(Path(local_app_data) / "Google" / "Chrome" / "User Data")

    return None


@dataclass
class BrowserConfig:
    """浏览器会话配置"""
    browser_type: str = "chrome"
    headless: bool = False
    session_type: str = "existing"
    user_data_dir: Optional[str] = None
    launch_timeout_ms: int = LAUNCH_TIMEOUT_MS
    navigation_settle_ms: int = NAVIGATION_SETTLE_MS
    action_settle_ms: int = ACTION_SETTLE_MS
    console_settle_ms: int = CONSOLE_SETTLE_MS

    def __post_init__(self):
        if self.browser_type not in BROWSER_TYPES:
            raise ValueError(
                f"Unsupported browser type: {self.browser_type} "
                f"(expected one of {', '.join(BROWSER_TYPES)})"
            )
        if self.session_type not in SESSION_TYPES:
            raise ValueError(
                f"Unsupported session type: {self.session_type} "
                f"(expected one of {', '.join(SESSION_TYPES)})"
            )

    @property
    def channel(self) -> Optional[str]:
        return "chrome" if self.browser_type == "chrome" else None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "BrowserConfig":
        """从环境变量读取配置：BROWSER_TYPE, HEADLESS, SESSION_TYPE, USER_DATA_DIR"""
        environ = os.environ if environ is None else environ
        return cls(
            browser_type=environ.get("BROWSER_TYPE") or "chrome",
            headless=environ.get("HEADLESS", "").lower() == "true",
            session_type=environ.get("SESSION_TYPE") or "existing",
            user_data_dir=environ.get("USER_DATA_DIR") or None,
            navigation_settle_ms=_env_int(environ, "NAVIGATION_SETTLE_MS", NAVIGATION_SETTLE_MS),
            action_settle_ms=_env_int(environ, "ACTION_SETTLE_MS", ACTION_SETTLE_MS),
        )


@dataclass
class ServerConfig:
    """MCP 服务器配置"""
    transport: str = DEFAULT_TRANSPORT
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ServerConfig":
        environ = os.environ if environ is None else environ
        return cls(
            transport=environ.get("MCP_TRANSPORT") or DEFAULT_TRANSPORT,
            host=environ.get("MCP_HOST") or DEFAULT_HOST,
            port=_env_int(environ, "MCP_PORT", DEFAULT_PORT),
            log_level=(environ.get("LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper(),
        )
