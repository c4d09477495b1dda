"""Tests for webdev_mcp.response and webdev_mcp.utils."""
from __future__ import annotations

import time

import pytest

from webdev_mcp.response import create_error_response, create_success_response
from webdev_mcp.utils import wait_for


def test_success_response_shape():
    response = create_success_response("done")

    assert response.to_dict() == {"content": [{"type": "text", "text": "done"}]}
    assert response.content[0].type == "text"
    assert response.content[0].text == "done"


def test_error_response_shape():
    response = create_error_response("nope")

    assert response.is_error
    assert response.to_dict() == {"content": [{"type": "text", "text": "nope"}], "isError": True}


@pytest.mark.asyncio
async def test_wait_for_suspends():
    start = time.monotonic()
    await wait_for(20)

    assert time.monotonic() - start >= 0.015
