"""
工具调用返回格式
"""
from dataclasses import dataclass
from typing import Any, Dict, List

from mcp.types import TextContent


@dataclass
class ToolResponse:
    """单条文本的工具调用结果"""
    text: str
    is_error: bool = False

    @property
    def content(self) -> List[TextContent]:
        return [TextContent(type="text", text=self.text)]

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"content": [{"type": "text", "text": self.text}]}
        if self.is_error:
            data["isError"] = True
        return data


def create_response(text: str, is_error: bool = False) -> ToolResponse:
    return ToolResponse(text=text, is_error=is_error)


def create_success_response(text: str) -> ToolResponse:
    return create_response(text, False)


def create_error_response(text: str) -> ToolResponse:
    return create_response(text, True)
