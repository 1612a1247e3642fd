"""常量模块。

集中管理系统常量，包括错误消息、HTTP 头、Cookie 名称等。
"""

from http import HTTPStatus as HttpStatus

from .http_headers import CookieNames, HttpHeaders
from .system_constants import (
    ErrorCategory,
    ErrorMessages,
    ErrorSeverity,
    LogLevel,
    SuccessMessages,
)

__all__ = [
    "CookieNames",
    "ErrorCategory",
    "ErrorMessages",
    "ErrorSeverity",
    "HttpHeaders",
    "HttpStatus",
    "LogLevel",
    "SuccessMessages",
]
