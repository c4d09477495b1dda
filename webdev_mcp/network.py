"""
网络请求记录的过滤与格式化
"""
import json
from typing import Any, Dict, List, Optional, Sequence

from .config import RESPONSE_BODY_PREVIEW_CHARS
from .models import NetworkRequest


def _parse_status_range(status_range: str) -> Optional[tuple]:
    """解析 "400-499" 或 "404"，格式不合法返回 None"""
    parts = status_range.split("-")
    try:
        numbers = [int(part) for part in parts]
    except ValueError:
        return None

    if len(numbers) == 2:
        return numbers[0], numbers[1]
    if len(numbers) == 1:
        return numbers[0], numbers[0]
    return None


def filter_requests(
    requests: Sequence[NetworkRequest],
    url_filter: Optional[str] = None,
    status_range: Optional[str] = None,
    head: Optional[int] = None,
    tail: Optional[int] = None,
) -> List[NetworkRequest]:
    """按 URL 子串、状态码范围过滤，再截取头部或尾部（tail 优先）"""
    result = list(requests)

    if url_filter:
        result = [req for req in result if url_filter in req.url]

    if status_range:
        bounds = _parse_status_range(status_range)
        if bounds is not None:
            low, high = bounds
            result = [req for req in result if req.status and low <= req.status <= high]

    if tail is not None and tail > 0:
        result = result[-tail:]
    elif head is not None and head > 0:
        result = result[:head]

    return result


def find_request(
    requests: Sequence[NetworkRequest],
    request_id: Optional[str] = None,
    url_pattern: Optional[str] = None,
) -> Optional[NetworkRequest]:
    """按 ID 查找，或返回最近一条 URL 包含 url_pattern 的记录"""
    if request_id:
        return next((req for req in requests if req.id == request_id), None)
    if url_pattern:
        matches = [req for req in requests if url_pattern in req.url]
        return matches[-1] if matches else None
    return None


def format_status(record: NetworkRequest) -> str:
    if record.error:
        return f"ERROR: {record.error}"
    if record.status:
        return f"{record.status} {record.status_text}"
    return "Pending"


def summarize_request(record: NetworkRequest) -> Dict[str, Any]:
    size = f"{record.response_size / 1024:.1f}KB" if record.response_size else "N/A"
    duration = f"{record.duration}ms" if record.duration else "N/A"
    return {
        "id": record.id,
        "method": record.method,
        "url": record.url,
        "status": format_status(record),
        "size": size,
        "duration": duration,
        "timestamp": record.timestamp,
    }


_NOT_JSON = object()


def _parse_body(body: str) -> Any:
    try:
        return json.loads(body)
    except ValueError:
        return _NOT_JSON


def describe_request(record: NetworkRequest) -> Dict[str, Any]:
    """单条请求的完整信息，JSON body 尽量解析，文本 body 超长截断"""
    details: Dict[str, Any] = {
        "id": record.id,
        "method": record.method,
        "url": record.url,
        "timestamp": record.timestamp,
        "request": {"headers": record.request_headers},
    }

    if record.request_body:
        parsed = _parse_body(record.request_body)
        details["request"]["body"] = record.request_body if parsed is _NOT_JSON else parsed

    if record.status:
        response: Dict[str, Any] = {
            "status": record.status,
            "statusText": record.status_text,
            "headers": record.response_headers,
        }
        if record.response_size:
            response["size"] = f"{record.response_size / 1024:.2f} KB"
        if record.duration:
            response["duration"] = f"{record.duration}ms"

        if record.response_body:
            parsed = _parse_body(record.response_body)
            if parsed is not _NOT_JSON:
                response["body"] = parsed
            elif len(record.response_body) > RESPONSE_BODY_PREVIEW_CHARS:
                response["body"] = (
                    record.response_body[:RESPONSE_BODY_PREVIEW_CHARS]
                    + f"\n... (truncated, {len(record.response_body)} total characters)"
                )
            else:
                response["body"] = record.response_body

        details["response"] = response
    elif record.error:
        details["error"] = record.error
    else:
        details["status"] = "Pending (no response yet)"

    return details


def to_json(data: Any) -> str:
    return json.dumps(data, ensure_ascii=False, indent=2)
