"""Fake Playwright objects shared by the test suite.

FakePage records listeners registered through ``page.on`` so tests can emit
console / request / response events the way the engine would.
"""
from __future__ import annotations

import inspect
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock


# ---------------------------------------------------------------------------
# Fake Playwright objects
# ---------------------------------------------------------------------------

class FakePage:
    def __init__(self):
        self.url = "about:blank"
        self.listeners: dict = {}
        self.closed = False
        self.goto_calls: list = []
        # async callable(page) run inside goto, used to emit load-time events
        self.on_goto = None

        self.query_selector = AsyncMock(return_value=MagicMock(name="element"))
        self.click = AsyncMock()
        self.fill = AsyncMock()
        self.wait_for_load_state = AsyncMock()
        self.eval_on_selector_all = AsyncMock(return_value=[])
        self.form_locator = MagicMock(name="locator")
        self.form_locator.evaluate = AsyncMock(side_effect=[True, None])
        self.locator = MagicMock(return_value=self.form_locator)

    def on(self, event, handler):
        self.listeners.setdefault(event, []).append(handler)

    async def emit(self, event, payload):
        for handler in self.listeners.get(event, []):
            result = handler(payload)
            if inspect.isawaitable(result):
                await result

    async def goto(self, url, wait_until=None):
        self.url = url
        self.goto_calls.append((url, wait_until))
        if self.on_goto is not None:
            await self.on_goto(self)

    async def close(self):
        self.closed = True


class FakeContext:
    def __init__(self, env):
        self.env = env
        self.close = AsyncMock()

    async def new_page(self):
        page = self.env.next_page()
        page.context = self
        return page


class FakeEnv:
    """Holds the fake driver, browser, contexts and pages for one test."""

    def __init__(self):
        self.pages: list = []
        self.contexts: list = []
        # pages to hand out before falling back to fresh FakePage objects
        self.queued_pages: list = []

        self.browser = MagicMock(name="browser")
        self.browser.new_context = AsyncMock(side_effect=self.new_context)
        self.browser.close = AsyncMock()

        self.persistent_context = FakeContext(self)

        self.playwright = MagicMock(name="playwright")
        self.playwright.chromium.launch = AsyncMock(return_value=self.browser)
        self.playwright.chromium.launch_persistent_context = AsyncMock(
            return_value=self.persistent_context
        )
        self.playwright.stop = AsyncMock()

    async def new_context(self, **kwargs):
        context = FakeContext(self)
        self.contexts.append(context)
        return context

    def next_page(self) -> FakePage:
        page = self.queued_pages.pop(0) if self.queued_pages else FakePage()
        self.pages.append(page)
        return page

    @property
    def page(self) -> FakePage:
        return self.pages[-1]


def console_message(kind: str, text: str):
    return SimpleNamespace(type=kind, text=text)


def fake_request(url: str, method: str = "GET", headers=None, post_data=None, failure=None):
    """post_data may be text or raw bytes; it is exposed as ``post_data_buffer``."""
    if isinstance(post_data, str):
        post_data = post_data.encode("utf-8")
    return SimpleNamespace(
        url=url,
        method=method,
        headers=headers or {"accept": "*/*"},
        post_data_buffer=post_data,
        failure=failure,
    )


def fake_response(request, status=200, status_text="OK", headers=None, text="", body=b""):
    response = SimpleNamespace(
        url=request.url,
        request=request,
        status=status,
        status_text=status_text,
        headers=headers if headers is not None else {"content-type": "text/plain"},
    )
    response.text = AsyncMock(return_value=text)
    response.body = AsyncMock(return_value=body)
    return response


