"""请求解析辅助函数."""

from __future__ import annotations

from typing import Any

from flask import request

from navhome.constants import HttpHeaders
from navhome.errors import ValidationError


def client_ip() -> str:
    """返回客户端 IP,优先使用代理转发头中的第一个地址."""
    forwarded = request.headers.get(HttpHeaders.X_FORWARDED_FOR, "")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.remote_addr or "unknown"


def get_json_payload() -> dict[str, Any]:
    """读取 JSON 请求体,非对象时抛出 ValidationError."""
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise ValidationError(message_key="JSON_REQUIRED")
    return payload
