#!/usr/bin/env python3
"""
基于官方 MCP SDK 的浏览器自动化服务器
支持 stdio（默认）和 SSE 两种传输方式

项目结构：
- webdev_mcp/
  ├── config.py            # 配置常量与环境变量
  ├── models.py            # 数据模型
  ├── browser_manager.py   # 浏览器会话管理器（核心逻辑）
  ├── network.py           # 网络请求过滤与格式化
  ├── handlers.py          # 工具处理函数
  ├── tools.py             # MCP 工具定义
  └── server.py            # 传输与进程入口
"""
import argparse
import contextlib
import logging
import signal
import sys
from typing import List, Optional

import anyio
import uvicorn
from mcp.server import Server
from mcp.server.sse import SseServerTransport
from mcp.server.stdio import stdio_server
from starlette.applications import Starlette
from starlette.responses import JSONResponse, Response
from starlette.routing import Mount, Route

from .browser_manager import BrowserManager
from .config import (
    LOG_FORMAT,
    SERVER_NAME,
    SERVER_VERSION,
    BrowserConfig,
    ServerConfig,
)
from .tools import create_tools, handle_tool_call

logger = logging.getLogger(__name__)


class ToolCallError(Exception):
    """工具返回的错误结果"""


def create_server(browser_manager: BrowserManager) -> Server:
    """创建 MCP 服务器并注册工具"""
    app = Server(SERVER_NAME, version=SERVER_VERSION)

    @app.list_tools()
    async def list_tools():
        """列出所有可用的浏览器工具"""
        return create_tools()

    @app.call_tool()
    async def call_tool(name: str, arguments: dict):
        """处理工具调用"""
        response = await handle_tool_call(browser_manager, name, arguments)
        if response.is_error:
            # 低层 Server 把处理函数抛出的异常转换为 isError=true 的工具结果
            raise ToolCallError(response.text)
        return response.content

    return app


# SSE 传输
def create_sse_app(app: Server, browser_manager: BrowserManager) -> Starlette:
    """创建 Starlette 应用，关闭时释放浏览器会话"""
    sse_transport = SseServerTransport("/messages/")

    async def handle_sse(request):
        """处理 SSE 连接"""
        logger.info(f"收到 SSE 连接请求: {request.method} {request.url}")
        try:
            async with sse_transport.connect_sse(
                request.scope, request.receive, request._send
            ) as streams:
                await app.run(streams[0], streams[1], app.create_initialization_options())
            logger.info("MCP 会话已结束")
        except Exception as e:
            logger.error(f"SSE 连接错误: {e}", exc_info=True)
            return JSONResponse({"error": str(e)}, status_code=500)
        return Response()

    async def health(request):
        return JSONResponse({"status": "ok", "service": SERVER_NAME, "version": SERVER_VERSION})

    @contextlib.asynccontextmanager
    async def lifespan(starlette_app):
        try:
            yield
        finally:
            await browser_manager.close()

    return Starlette(
        routes=[
            Route("/sse", endpoint=handle_sse, methods=["GET"]),
            Route("/mcp", endpoint=handle_sse, methods=["GET"]),
            Mount("/messages/", app=sse_transport.handle_post_message),
            Route("/health", endpoint=health, methods=["GET"]),
        ],
        lifespan=lifespan,
    )


# stdio 传输
async def _watch_signals(scope: anyio.CancelScope, browser_manager: BrowserManager) -> None:
    """收到 SIGINT / SIGTERM 时先关闭浏览器会话，再取消 stdio 服务

    stdin 读取线程在取消后仍可能阻塞到下一行输入，浏览器须在取消前关闭。
    """
    try:
        with anyio.open_signal_receiver(signal.SIGINT, signal.SIGTERM) as signals:
            async for signum in signals:
                logger.info(f"收到信号 {signal.Signals(signum).name}，正在关闭...")
                with anyio.CancelScope(shield=True):
                    await browser_manager.close()
                scope.cancel()
                return
    except NotImplementedError:
        # 当前平台不支持信号接收（Windows），依赖 KeyboardInterrupt
        return


async def run_stdio(app: Server, browser_manager: BrowserManager) -> None:
    """通过 stdio 运行 MCP 服务器，退出前关闭浏览器"""
    try:
        async with anyio.create_task_group() as task_group:
            task_group.start_soon(_watch_signals, task_group.cancel_scope, browser_manager)
            async with stdio_server() as (read_stream, write_stream):
                logger.info("MCP 服务器已连接（stdio）")
                await app.run(read_stream, write_stream, app.create_initialization_options())
            task_group.cancel_scope.cancel()
    finally:
        with anyio.CancelScope(shield=True):
            await browser_manager.close()


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog=SERVER_NAME,
        description="MCP server exposing browser automation, console and network inspection tools",
    )
    parser.add_argument("--transport", choices=["stdio", "sse"], help="MCP transport (default: stdio, env MCP_TRANSPORT)")
    parser.add_argument("--host", help="SSE bind host (env MCP_HOST)")
    parser.add_argument("--port", type=int, help="SSE bind port (env MCP_PORT)")
    parser.add_argument("--log-level", help="Logging level (env LOG_LEVEL)")
    parser.add_argument("--headless", action="store_true", default=None, help="Run the browser headless (env HEADLESS=true)")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """进程入口"""
    args = parse_args(argv)

    server_config = ServerConfig.from_env()
    if args.transport:
        server_config.transport = args.transport
    if args.host:
        server_config.host = args.host
    if args.port:
        server_config.port = args.port
    if args.log_level:
        server_config.log_level = args.log_level.upper()

    # stdout 留给 stdio 传输，日志写 stderr
    logging.basicConfig(level=server_config.log_level, format=LOG_FORMAT, stream=sys.stderr)

    try:
        browser_config = BrowserConfig.from_env()
        if args.headless:
            browser_config.headless = True

        browser_manager = BrowserManager(browser_config)
        app = create_server(browser_manager)

        if server_config.transport == "sse":
            host, port = server_config.host, server_config.port
            logger.info(f"SSE 端点: http://{host}:{port}/sse")
            logger.info(f"消息端点: http://{host}:{port}/messages/")
            uvicorn.run(
                create_sse_app(app, browser_manager),
                host=host,
                port=port,
                log_level=server_config.log_level.lower(),
            )
        else:
            anyio.run(run_stdio, app, browser_manager)
    except KeyboardInterrupt:
        logger.info("服务器已停止")
    except Exception:
        logger.exception("服务器异常退出")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
