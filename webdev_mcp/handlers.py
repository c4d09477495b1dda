"""
工具处理函数
每个函数把一次工具调用翻译成 BrowserManager / Page 调用，并返回 ToolResponse
"""
import asyncio
import logging
from typing import Any, Dict, Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page

from .browser_manager import BrowserManager
from .network import describe_request, filter_requests, find_request, summarize_request, to_json
from .response import ToolResponse, create_error_response, create_success_response
from .utils import wait_for

logger = logging.getLogger(__name__)

NO_PAGE_MESSAGE = "No page is currently loaded. Please navigate to a page first."
NO_CONSOLE_LOGS_MESSAGE = "No console logs available."
NO_NETWORK_REQUESTS_MESSAGE = "No network requests found matching the criteria."

IS_FORM_JS = "el => el.tagName.toLowerCase() === 'form'"

SUBMIT_FORM_JS = """
form => {
    const submitButton = form.querySelector('button[type="submit"], input[type="submit"]')
    if (submitButton) {
        submitButton.click()
    } else {
        form.dispatchEvent(new Event('submit', { bubbles: true, cancelable: true }))
    }
}
"""

INSPECT_ELEMENTS_JS = """
els => els.map(el => {
    const computedStyle = getComputedStyle(el)
    const rect = el.getBoundingClientRect()
    const attributes = {}
    for (const attr of Array.from(el.attributes)) {
        attributes[attr.name] = attr.value
    }
    return {
        attributes,
        className: el.className || null,
        id: el.id || null,
        innerHTML: el.innerHTML.substring(0, 200),
        isVisible:
            rect.width > 0 &&
            rect.height > 0 &&
            computedStyle.visibility !== 'hidden' &&
            computedStyle.display !== 'none',
        position: {
            height: rect.height,
            width: rect.width,
            x: rect.x,
            y: rect.y
        },
        styles: {
            backgroundColor: computedStyle.backgroundColor,
            color: computedStyle.color,
            display: computedStyle.display,
            fontSize: computedStyle.fontSize,
            fontWeight: computedStyle.fontWeight,
            opacity: computedStyle.opacity,
            position: computedStyle.position,
            visibility: computedStyle.visibility,
            zIndex: computedStyle.zIndex
        },
        tagName: el.tagName.toLowerCase(),
        textContent: (el.textContent || '').trim().substring(0, 100) || null
    }
})
"""

OUTER_HTML_JS = "els => els.map(el => el.outerHTML)"


class MissingArgumentError(ValueError):
    """缺少必填参数"""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Missing required argument: {name}")


def _required(arguments: Dict[str, Any], name: str) -> str:
    value = arguments.get(name)
    if value is None or value == "":
        raise MissingArgumentError(name)
    return value


async def _wait_for_network_idle(page: Page) -> None:
    """尽力等待网络空闲；操作不一定触发导航，超时忽略"""
    try:
        await page.wait_for_load_state("networkidle")
    except PlaywrightError as e:
        logger.debug(f"等待网络空闲失败（忽略）: {e}")


# 导航
async def navigate(browser_manager: BrowserManager, arguments: Dict[str, Any]) -> ToolResponse:
    url = arguments.get("url")
    try:
        url = _required(arguments, "url")
        await browser_manager.navigate(url)
        return create_success_response(f"Successfully navigated to {url}")
    except MissingArgumentError as e:
        return create_error_response(str(e))
    except Exception as e:
        logger.error(f"导航失败: {url}, 错误: {e}")
        return create_error_response(f"Failed to navigate to {url}: {e}")


async def reload(browser_manager: BrowserManager, arguments: Dict[str, Any]) -> ToolResponse:
    try:
        await browser_manager.wait_for_navigation_complete()
        page = browser_manager.get_page()
        if page is None:
            return create_error_response(NO_PAGE_MESSAGE)

        # 重新导航而不是 page.reload()，保证控制台和网络记录被重置
        await browser_manager.navigate(page.url)
        return create_success_response("Page reloaded successfully")
    except Exception as e:
        logger.error(f"重新加载失败: {e}")
        return create_error_response(f"Failed to reload page: {e}")


# 控制台
async def console(browser_manager: BrowserManager, arguments: Dict[str, Any]) -> ToolResponse:
    text_filter: Optional[str] = arguments.get("filter")
    head: Optional[int] = arguments.get("head")
    tail: Optional[int] = arguments.get("tail")
    try:
        await browser_manager.wait_for_navigation_complete()
        if browser_manager.get_page() is not None:
            await wait_for(browser_manager.config.console_settle_ms)

        logs = browser_manager.get_console_logs()
        if text_filter:
            needle = text_filter.lower()
            logs = [line for line in logs if needle in line.lower()]

        if tail is not None and tail > 0:
            logs = logs[-tail:]
        elif head is not None and head > 0:
            logs = logs[:head]

        if not logs:
            return create_success_response(NO_CONSOLE_LOGS_MESSAGE)
        return create_success_response("\n".join(logs))
    except Exception as e:
        logger.error(f"读取控制台日志失败: {e}")
        return create_error_response(f"Failed to retrieve console logs: {e}")


# 页面交互
async def click(browser_manager: BrowserManager, arguments: Dict[str, Any]) -> ToolResponse:
    selector = arguments.get("selector")
    try:
        selector = _required(arguments, "selector")
        await browser_manager.wait_for_navigation_complete()
        page = browser_manager.get_page()
        if page is None:
            return create_error_response(NO_PAGE_MESSAGE)

        if await page.query_selector(selector) is None:
            return create_error_response(f"No element found matching selector: {selector}")

        await asyncio.gather(_wait_for_network_idle(page), page.click(selector))
        await wait_for(browser_manager.config.action_settle_ms)

        return create_success_response(f"Successfully clicked element matching selector: {selector}")
    except MissingArgumentError as e:
        return create_error_response(str(e))
    except Exception as e:
        logger.error(f"点击失败: {selector}, 错误: {e}")
        return create_error_response(f"Failed to click element with selector '{selector}': {e}")


async def fill(browser_manager: BrowserManager, arguments: Dict[str, Any]) -> ToolResponse:
    selector = arguments.get("selector")
    try:
        selector = _required(arguments, "selector")
        value = arguments.get("value")
        if value is None:
            raise MissingArgumentError("value")

        await browser_manager.wait_for_navigation_complete()
        page = browser_manager.get_page()
        if page is None:
            return create_error_response(NO_PAGE_MESSAGE)

        if await page.query_selector(selector) is None:
            return create_error_response(f"No element found matching selector: {selector}")

        await page.fill(selector, str(value))

        return create_success_response(f"Successfully filled element matching selector: {selector}")
    except MissingArgumentError as e:
        return create_error_response(str(e))
    except Exception as e:
        logger.error(f"填写失败: {selector}, 错误: {e}")
        return create_error_response(f"Failed to fill element with selector '{selector}': {e}")


async def submit(browser_manager: BrowserManager, arguments: Dict[str, Any]) -> ToolResponse:
    selector = arguments.get("selector")
    try:
        selector = _required(arguments, "selector")
        await browser_manager.wait_for_navigation_complete()
        page = browser_manager.get_page()
        if page is None:
            return create_error_response(NO_PAGE_MESSAGE)

        if await page.query_selector(selector) is None:
            return create_error_response(f"No element found matching selector: {selector}")

        form = page.locator(selector)
        if not await form.evaluate(IS_FORM_JS):
            return create_error_response("Element is not a form")

        await asyncio.gather(_wait_for_network_idle(page), form.evaluate(SUBMIT_FORM_JS))
        await wait_for(browser_manager.config.action_settle_ms)

        return create_success_response(f"Successfully submitted form matching selector: {selector}")
    except MissingArgumentError as e:
        return create_error_response(str(e))
    except Exception as e:
        logger.error(f"提交表单失败: {selector}, 错误: {e}")
        return create_error_response(f"Failed to submit form with selector '{selector}': {e}")


# DOM 查询
async def inspect_elements(browser_manager: BrowserManager, arguments: Dict[str, Any]) -> ToolResponse:
    try:
        selector = _required(arguments, "selector")
    except MissingArgumentError as e:
        return create_error_response(str(e))

    try:
        await browser_manager.wait_for_navigation_complete()
        page = browser_manager.get_page()
        if page is None:
            return create_error_response(NO_PAGE_MESSAGE)

        elements = await page.eval_on_selector_all(selector, INSPECT_ELEMENTS_JS)
    except Exception as e:
        return create_error_response(f"Error querying DOM elements: {e}")

    if not elements:
        return create_success_response(f"No elements found matching selector: {selector}")

    return create_success_response(to_json({
        "selector": selector,
        "count": len(elements),
        "elements": elements,
    }))


async def extract_html(browser_manager: BrowserManager, arguments: Dict[str, Any]) -> ToolResponse:
    try:
        selector = _required(arguments, "selector")
    except MissingArgumentError as e:
        return create_error_response(str(e))

    try:
        await browser_manager.wait_for_navigation_complete()
        page = browser_manager.get_page()
        if page is None:
            return create_error_response(NO_PAGE_MESSAGE)

        html_elements = await page.eval_on_selector_all(selector, OUTER_HTML_JS)
    except Exception as e:
        return create_error_response(f"Error querying HTML: {e}")

    if not html_elements:
        return create_success_response(f"No elements found matching selector: {selector}")

    return create_success_response("\n\n".join(html_elements))


# 网络请求
async def network_requests(browser_manager: BrowserManager, arguments: Dict[str, Any]) -> ToolResponse:
    try:
        await browser_manager.wait_for_navigation_complete()
        if browser_manager.get_page() is None:
            return create_error_response(NO_PAGE_MESSAGE)

        requests = filter_requests(
            browser_manager.get_network_requests(),
            url_filter=arguments.get("filter"),
            status_range=arguments.get("statusRange"),
            head=arguments.get("head"),
            tail=arguments.get("tail"),
        )
        if not requests:
            return create_success_response(NO_NETWORK_REQUESTS_MESSAGE)

        summary = [summarize_request(req) for req in requests]
        return create_success_response(to_json({"count": len(summary), "requests": summary}))
    except Exception as e:
        logger.error(f"读取网络请求失败: {e}")
        return create_error_response(f"Failed to retrieve network requests: {e}")


async def network_inspect(browser_manager: BrowserManager, arguments: Dict[str, Any]) -> ToolResponse:
    request_id = arguments.get("id")
    url_pattern = arguments.get("urlPattern")
    try:
        await browser_manager.wait_for_navigation_complete()
        if browser_manager.get_page() is None:
            return create_error_response(NO_PAGE_MESSAGE)

        requests = browser_manager.get_network_requests()
        if not requests:
            return create_success_response("No network requests have been captured.")

        if not request_id and not url_pattern:
            return create_error_response("Please provide either an ID or URL pattern to inspect a request.")

        record = find_request(requests, request_id=request_id, url_pattern=url_pattern)
        if record is None:
            identifier = f"ID {request_id}" if request_id else f'URL pattern "{url_pattern}"'
            return create_error_response(f"No network request found matching {identifier}.")

        return create_success_response(to_json(describe_request(record)))
    except Exception as e:
        logger.error(f"查看网络请求失败: {e}")
        return create_error_response(f"Failed to inspect network request: {e}")


async def network_clear(browser_manager: BrowserManager, arguments: Dict[str, Any]) -> ToolResponse:
    try:
        await browser_manager.wait_for_navigation_complete()
        if browser_manager.get_page() is None:
            return create_error_response(NO_PAGE_MESSAGE)

        previous_count = len(browser_manager.get_network_requests())
        browser_manager.clear_network_requests()

        plural = "" if previous_count == 1 else "s"
        return create_success_response(f"Cleared {previous_count} network request{plural} from the buffer.")
    except Exception as e:
        logger.error(f"清空网络请求失败: {e}")
        return create_error_response(f"Failed to clear network requests: {e}")
