"""
浏览器会话管理器核心类
负责唯一的浏览器会话（browser / context / page）、控制台日志缓冲和网络请求记录
"""
import asyncio
import logging
import time
from functools import partial
from typing import Dict, List, Optional, Tuple

from playwright.async_api import (
    Browser,
    BrowserContext,
    ConsoleMessage,
    Page,
    Playwright,
    Request,
    Response,
    async_playwright,
)

from .config import (
    BODY_METHODS,
    NAVIGATION_WAIT_TIMEOUT_MS,
    TEXTUAL_CONTENT_TYPES,
    BrowserConfig,
    default_chrome_user_data_dir,
)
from .models import NavigationTimeoutError, NetworkRequest
from .utils import wait_for

logger = logging.getLogger(__name__)


class BrowserManager:
    """浏览器会话管理器

    同一时间只持有一个 context 和一个 page。每次 navigate 都会清空控制台日志和
    网络请求记录，并重置请求编号。导航期间其它调用方通过
    wait_for_navigation_complete 等待导航结束。
    """

    def __init__(self, config: Optional[BrowserConfig] = None):
        self.config = config or BrowserConfig()
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._page: Optional[Page] = None
        self._persistent = False
        self._console_buffer: List[str] = []
        self._network_requests: List[NetworkRequest] = []
        # (url, method) -> (开始时间, 记录)；同一 key 后写覆盖先写
        self._request_map: Dict[Tuple[str, str], Tuple[float, NetworkRequest]] = {}
        self._request_id_counter = 0
        self._epoch = 0
        self._idle = asyncio.Event()
        self._idle.set()

    # 状态访问
    def get_page(self) -> Optional[Page]:
        return self._page

    def get_console_logs(self) -> List[str]:
        return list(self._console_buffer)

    def get_network_requests(self) -> List[NetworkRequest]:
        return list(self._network_requests)

    def is_navigation_in_progress(self) -> bool:
        return not self._idle.is_set()

    def is_launched(self) -> bool:
        return self._browser is not None or self._context is not None

    def clear_network_requests(self) -> None:
        self._network_requests = []
        self._request_map = {}
        self._request_id_counter = 0

    async def wait_for_navigation_complete(self, timeout_ms: int = NAVIGATION_WAIT_TIMEOUT_MS) -> None:
        """等待正在进行的导航结束，超时抛出 NavigationTimeoutError"""
        if self._idle.is_set():
            return
        try:
            await asyncio.wait_for(self._idle.wait(), timeout=timeout_ms / 1000)
        except asyncio.TimeoutError:
            raise NavigationTimeoutError(timeout_ms) from None

    # 生命周期
    async def launch(self) -> None:
        """启动浏览器（已启动时直接返回）"""
        if self.is_launched():
            return

        config = self.config
        logger.info(
            f"启动浏览器: type={config.browser_type}, session={config.session_type}, headless={config.headless}"
        )

        if self._playwright is None:
            self._playwright = await async_playwright().start()

        try:
            if config.session_type == "existing":
                user_data_dir = config.user_data_dir or default_chrome_user_data_dir()
                if not user_data_dir:
                    raise RuntimeError("Could not determine Chrome user data directory for this platform.")

                logger.info(f"使用持久化用户目录启动: {user_data_dir}")
                self._context = await self._playwright.chromium.launch_persistent_context(
                    user_data_dir,
                    channel=config.channel,
                    headless=config.headless,
                    timeout=config.launch_timeout_ms,
                )
                self._persistent = True
                logger.info(f"浏览器已启动（持久化 context，headless={config.headless}）")
            else:
                self._browser = await self._playwright.chromium.launch(
                    channel=config.channel,
                    headless=config.headless,
                    timeout=config.launch_timeout_ms,
                )
                self._persistent = False
                logger.info(f"浏览器已启动（全新实例，headless={config.headless}）")
        except Exception as e:
            logger.error(f"启动浏览器失败: {e}")
            await self._stop_playwright()
            raise

    async def close(self) -> None:
        """关闭浏览器会话并清空所有缓冲，可重复调用"""
        if not self.is_launched():
            await self._stop_playwright()
            return

        logger.info("关闭浏览器会话")
        if self._context is not None:
            try:
                await self._context.close()
            except Exception as e:
                logger.warning(f"关闭 context 失败: {e}")
            self._context = None
        if self._browser is not None:
            try:
                await self._browser.close()
            except Exception as e:
                logger.warning(f"关闭浏览器失败: {e}")
            self._browser = None
        await self._stop_playwright()

        self._page = None
        self._persistent = False
        self._console_buffer = []
        self.clear_network_requests()
        self._epoch += 1
        self._idle.set()

    async def _stop_playwright(self) -> None:
        if self._playwright is None:
            return
        try:
            await self._playwright.stop()
        except Exception as e:
            logger.warning(f"停止 Playwright 失败: {e}")
        self._playwright = None

    # 导航
    async def navigate(self, url: str) -> None:
        """打开新页面并导航到 url，期间记录控制台和网络事件"""
        logger.info(f"导航到: {url}")

        if not self.is_launched():
            await self.launch()

        self._idle.clear()
        self._epoch += 1
        epoch = self._epoch
        try:
            self._console_buffer = []
            self.clear_network_requests()

            if self._page is not None:
                await self._page.close()
                self._page = None

            if self._persistent:
                context = self._context
            else:
                if self._browser is None:
                    raise RuntimeError("A browser instance is required.")
                if self._context is not None:
                    await self._context.close()
                    self._context = None
                context = await self._browser.new_context()
                self._context = context

            page = await context.new_page()
            self._page = page

            page.on("console", partial(self._on_console, epoch))
            page.on("request", partial(self._on_request, epoch))
            page.on("response", partial(self._on_response, epoch))
            page.on("requestfailed", partial(self._on_request_failed, epoch))

            await page.goto(url, wait_until="networkidle")

            await wait_for(self.config.navigation_settle_ms)
        finally:
            # 被更新的导航取代时，由最新的导航负责恢复空闲状态
            if epoch == self._epoch:
                self._idle.set()

    # 事件监听
    def _on_console(self, epoch: int, message: ConsoleMessage) -> None:
        if epoch != self._epoch:
            return
        self._console_buffer.append(f"[{message.type}] {message.text}")

    def _on_request(self, epoch: int, request: Request) -> None:
        if epoch != self._epoch:
            return

        method = request.method
        request_body = None
        if method in BODY_METHODS:
            # post_data 严格按 UTF-8 解码，二进制/multipart 上传会抛异常
            post_data = request.post_data_buffer
            if post_data:
                request_body = post_data.decode("utf-8", errors="replace")

        record = NetworkRequest(
            id=f"req_{self._request_id_counter + 1}",
            method=method,
            url=request.url,
            request_headers=dict(request.headers),
            request_body=request_body,
        )
        self._request_id_counter += 1

        self._request_map[record.correlation_key] = (time.monotonic(), record)
        self._network_requests.append(record)

    async def _on_response(self, epoch: int, response: Response) -> None:
        if epoch != self._epoch:
            return

        entry = self._request_map.get((response.url, response.request.method))
        if entry is None:
            return
        start_time, record = entry

        headers = dict(response.headers)
        record.status = response.status
        record.status_text = response.status_text
        record.response_headers = headers
        record.duration = int((time.monotonic() - start_time) * 1000)

        try:
            content_type = headers.get("content-type", "")
            if any(kind in content_type for kind in TEXTUAL_CONTENT_TYPES):
                body = await response.text()
                record.response_body = body
                record.response_size = len(body.encode("utf-8"))
            else:
                record.response_size = len(await response.body())
        except Exception as e:
            # 部分响应（重定向、已释放的资源等）无法读取 body
            logger.warning(f"获取响应内容失败: {response.url}, 错误: {e}")

    def _on_request_failed(self, epoch: int, request: Request) -> None:
        if epoch != self._epoch:
            return

        entry = self._request_map.get((request.url, request.method))
        if entry is None:
            return
        _, record = entry
        record.error = request.failure or "Request failed"
