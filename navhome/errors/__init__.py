"""导航主页 - 统一异常定义.

服务层只抛出 `AppError` 子类,路由层与全局错误处理器据此生成统一的错误信封:
状态码来自类上的 `ExceptionMetadata`,分类与严重度决定日志级别.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from werkzeug.exceptions import HTTPException

from navhome.constants import HttpStatus
from navhome.constants.system_constants import ErrorCategory, ErrorMessages, ErrorSeverity


@dataclass(frozen=True, slots=True)
class ExceptionMetadata:
    """异常类型的固定属性,由子类在类级别声明."""

    status_code: int
    category: ErrorCategory
    severity: ErrorSeverity
    default_message_key: str


class AppError(Exception):
    """所有业务异常的基类.

    Args:
        message: 返回给调用方的文案,为空时按 ``message_key`` 查 `ErrorMessages`.
        message_key: `ErrorMessages` 中的键名,同时作为错误信封里的 ``message_code``.
        extra: 写入日志与错误信封的上下文.

    """

    metadata = ExceptionMetadata(
        status_code=HttpStatus.INTERNAL_SERVER_ERROR,
        category=ErrorCategory.SYSTEM,
        severity=ErrorSeverity.HIGH,
        default_message_key="INTERNAL_ERROR",
    )

    def __init__(
        self,
        message: str | None = None,
        *,
        message_key: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        self.message_key = message_key or self.metadata.default_message_key
        self.message = message or getattr(ErrorMessages, self.message_key, ErrorMessages.INTERNAL_ERROR)
        self.extra = dict(extra or {})
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return int(self.metadata.status_code)

    @property
    def category(self) -> ErrorCategory:
        return self.metadata.category

    @property
    def severity(self) -> ErrorSeverity:
        return self.metadata.severity

    @property
    def recoverable(self) -> bool:
        """LOW/MEDIUM 级别的错误由调用方修正请求即可,不记为服务端故障."""
        return self.severity in (ErrorSeverity.LOW, ErrorSeverity.MEDIUM)


class ValidationError(AppError):
    """表单或 JSON 字段不合法: 名称为空、URL 格式错误、设置值越界等."""

    metadata = ExceptionMetadata(
        status_code=HttpStatus.BAD_REQUEST,
        category=ErrorCategory.VALIDATION,
        severity=ErrorSeverity.LOW,
        default_message_key="VALIDATION_ERROR",
    )


class AuthenticationError(AppError):
    """未登录或用户名密码错误."""

    metadata = ExceptionMetadata(
        status_code=HttpStatus.UNAUTHORIZED,
        category=ErrorCategory.AUTHENTICATION,
        severity=ErrorSeverity.MEDIUM,
        default_message_key="AUTHENTICATION_REQUIRED",
    )


class AuthorizationError(AppError):
    """账户被停用,或公开提交功能已关闭."""

    metadata = ExceptionMetadata(
        status_code=HttpStatus.FORBIDDEN,
        category=ErrorCategory.AUTHORIZATION,
        severity=ErrorSeverity.MEDIUM,
        default_message_key="PERMISSION_DENIED",
    )


class NotFoundError(AppError):
    """分类、书签或待审核条目不存在.

    私密书签对匿名访问者同样按不存在处理,不暴露其存在.
    """

    metadata = ExceptionMetadata(
        status_code=HttpStatus.NOT_FOUND,
        category=ErrorCategory.BUSINESS,
        severity=ErrorSeverity.LOW,
        default_message_key="RESOURCE_NOT_FOUND",
    )


class ConflictError(AppError):
    """删除仍含子分类或书签的分类,或分类名称重复."""

    metadata = ExceptionMetadata(
        status_code=HttpStatus.CONFLICT,
        category=ErrorCategory.BUSINESS,
        severity=ErrorSeverity.MEDIUM,
        default_message_key="CONSTRAINT_VIOLATION",
    )


class RateLimitError(AppError):
    """公开提交超出频率限制,或同一 IP 登录失败次数过多."""

    metadata = ExceptionMetadata(
        status_code=HttpStatus.TOO_MANY_REQUESTS,
        category=ErrorCategory.SECURITY,
        severity=ErrorSeverity.MEDIUM,
        default_message_key="RATE_LIMIT_EXCEEDED",
    )


class DatabaseError(AppError):
    """书签列表读取失败,首页无法降级渲染."""

    metadata = ExceptionMetadata(
        status_code=HttpStatus.INTERNAL_SERVER_ERROR,
        category=ErrorCategory.DATABASE,
        severity=ErrorSeverity.HIGH,
        default_message_key="DATABASE_QUERY_ERROR",
    )


class SystemError(AppError):
    """路由内未预期的异常,由 `safe_route_call` 包装后抛出."""

    metadata = ExceptionMetadata(
        status_code=HttpStatus.INTERNAL_SERVER_ERROR,
        category=ErrorCategory.SYSTEM,
        severity=ErrorSeverity.CRITICAL,
        default_message_key="INTERNAL_ERROR",
    )


def map_exception_to_status(error: Exception, default: int = HttpStatus.INTERNAL_SERVER_ERROR) -> int:
    """业务异常取类上声明的状态码,Werkzeug HTTP 异常取其 ``code``,其余返回 ``default``."""
    if isinstance(error, AppError):
        return error.status_code
    if isinstance(error, HTTPException) and error.code is not None:
        return int(error.code)
    return int(default)


__all__ = [
    "AppError",
    "AuthenticationError",
    "AuthorizationError",
    "ConflictError",
    "DatabaseError",
    "ExceptionMetadata",
    "NotFoundError",
    "RateLimitError",
    "SystemError",
    "ValidationError",
    "map_exception_to_status",
]
