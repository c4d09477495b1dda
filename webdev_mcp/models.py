"""
数据模型定义
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Optional


def utc_timestamp() -> str:
    """ISO-8601 UTC 时间戳，毫秒精度，例如 2024-01-01T00:00:00.000Z"""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass
class NetworkRequest:
    """网络请求记录

    请求开始时创建并立即写入记录表，响应或失败事件到达后再补全结果字段。
    """
    id: str
    method: str
    url: str
    request_headers: Dict[str, str] = field(default_factory=dict)
    timestamp: str = field(default_factory=utc_timestamp)
    request_body: Optional[str] = None
    status: Optional[int] = None
    status_text: Optional[str] = None
    response_headers: Optional[Dict[str, str]] = None
    response_body: Optional[str] = None
    response_size: Optional[int] = None
    duration: Optional[int] = None
    error: Optional[str] = None

    @property
    def correlation_key(self) -> tuple:
        return (self.url, self.method)


class NavigationTimeoutError(TimeoutError):
    """等待导航完成超时"""

    def __init__(self, timeout_ms: int):
        self.timeout_ms = timeout_ms
        super().__init__(f"Navigation wait timeout reached after {timeout_ms}ms")
