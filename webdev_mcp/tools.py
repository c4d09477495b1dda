"""
MCP 工具定义和调用处理
"""
from typing import Any, Dict, List

from mcp.types import Tool

from . import handlers
from .response import ToolResponse

SELECTOR_SCHEMA = {
    "type": "string",
    "description": 'CSS selector (e.g. ".button", "#header", "div[data-test]")',
}


def create_tools() -> List[Tool]:
    """创建并返回所有可用的浏览器工具列表"""
    return [
        Tool(
            name="browser-navigate",
            description="Navigate the browser to a specific URL and start monitoring the page",
            inputSchema={
                "type": "object",
                "properties": {
                    "url": {"type": "string", "description": "The URL to navigate to"}
                },
                "required": ["url"]
            }
        ),
        Tool(
            name="browser-reload",
            description="Reload the current page and refresh console logs",
            inputSchema={
                "type": "object",
                "properties": {}
            }
        ),
        Tool(
            name="browser-console",
            description="Retrieve console messages (logs, errors, warnings) from the current page",
            inputSchema={
                "type": "object",
                "properties": {
                    "filter": {"type": "string", "description": "Only return lines containing this text (case-insensitive)"},
                    "head": {"type": "integer", "minimum": 1, "description": "Return only the first N lines"},
                    "tail": {"type": "integer", "minimum": 1, "description": "Return only the last N lines (takes precedence over head)"}
                }
            }
        ),
        Tool(
            name="click-element",
            description="Click an element on the current page",
            inputSchema={
                "type": "object",
                "properties": {
                    "selector": SELECTOR_SCHEMA
                },
                "required": ["selector"]
            }
        ),
        Tool(
            name="fill-input",
            description="Fill an input or textarea on the current page with a value",
            inputSchema={
                "type": "object",
                "properties": {
                    "selector": SELECTOR_SCHEMA,
                    "value": {"type": "string", "description": "The value to fill in"}
                },
                "required": ["selector", "value"]
            }
        ),
        Tool(
            name="submit-form",
            description="Submit a form by clicking its submit button or dispatching a submit event",
            inputSchema={
                "type": "object",
                "properties": {
                    "selector": SELECTOR_SCHEMA
                },
                "required": ["selector"]
            }
        ),
        Tool(
            name="inspect-elements",
            description="Get detailed information about DOM elements including styles, position, visibility, and attributes",
            inputSchema={
                "type": "object",
                "properties": {
                    "selector": SELECTOR_SCHEMA
                },
                "required": ["selector"]
            }
        ),
        Tool(
            name="extract-html",
            description="Extract raw HTML markup of elements for testing or analysis",
            inputSchema={
                "type": "object",
                "properties": {
                    "selector": {"type": "string", "description": 'CSS selector to extract HTML from (e.g. ".alert", "[role=dialog]")'}
                },
                "required": ["selector"]
            }
        ),
        Tool(
            name="network-requests",
            description="List network requests captured since the last navigation",
            inputSchema={
                "type": "object",
                "properties": {
                    "filter": {"type": "string", "description": "Only include requests whose URL contains this text"},
                    "statusRange": {"type": "string", "description": 'Status code or inclusive range, e.g. "404" or "400-499"'},
                    "head": {"type": "integer", "minimum": 1, "description": "Return only the first N requests"},
                    "tail": {"type": "integer", "minimum": 1, "description": "Return only the last N requests (takes precedence over head)"}
                }
            }
        ),
        Tool(
            name="network-inspect",
            description="Show full details (headers, bodies, timing) of a single captured network request",
            inputSchema={
                "type": "object",
                "properties": {
                    "id": {"type": "string", "description": 'Request ID, e.g. "req_3"'},
                    "urlPattern": {"type": "string", "description": "Inspect the most recent request whose URL contains this text"}
                }
            }
        ),
        Tool(
            name="network-clear",
            description="Clear the captured network requests buffer",
            inputSchema={
                "type": "object",
                "properties": {}
            }
        ),
    ]


TOOL_HANDLERS = {
    "browser-navigate": handlers.navigate,
    "browser-reload": handlers.reload,
    "browser-console": handlers.console,
    "click-element": handlers.click,
    "fill-input": handlers.fill,
    "submit-form": handlers.submit,
    "inspect-elements": handlers.inspect_elements,
    "extract-html": handlers.extract_html,
    "network-requests": handlers.network_requests,
    "network-inspect": handlers.network_inspect,
    "network-clear": handlers.network_clear,
}


async def handle_tool_call(browser_manager, name: str, arguments: Dict[str, Any]) -> ToolResponse:
    """处理工具调用"""
    if name not in TOOL_HANDLERS:
        raise ValueError(f"Unknown tool: {name}")

    handler = TOOL_HANDLERS[name]
    return await handler(browser_manager, arguments or {})
