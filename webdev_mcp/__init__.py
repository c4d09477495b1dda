"""
webdev-mcp 浏览器自动化 MCP 服务器

- config: 配置常量与环境变量
- models: 数据模型
- browser_manager: 浏览器会话管理器核心类
- network: 网络请求过滤与格式化
- handlers / tools: MCP 工具处理与定义
- server: 传输与进程入口
"""

from .browser_manager import BrowserManager
from .config import DEFAULT_HOST, DEFAULT_PORT, BrowserConfig, ServerConfig
from .models import NavigationTimeoutError, NetworkRequest
from .response import ToolResponse, create_error_response, create_success_response
from .tools import create_tools, handle_tool_call

__all__ = [
    "BrowserManager",
    "BrowserConfig",
    "ServerConfig",
    "NavigationTimeoutError",
    "NetworkRequest",
    "ToolResponse",
    "create_error_response",
    "create_success_response",
    "create_tools",
    "handle_tool_call",
    "DEFAULT_HOST",
    "DEFAULT_PORT",
]
