"""导航主页的结构化日志配置与辅助函数."""

from __future__ import annotations

import sys
from contextlib import suppress
from typing import TYPE_CHECKING, Any, cast
from uuid import uuid4

import structlog
from flask import Flask, current_app, has_request_context, request
from flask_login import current_user

from navhome.constants import HttpHeaders
from navhome.constants.system_constants import ErrorSeverity
from navhome.settings import APP_VERSION
from navhome.utils.logging.context_vars import request_id_var, user_id_var
from navhome.utils.logging.error_adapter import ErrorContext, ErrorMetadata, derive_error_metadata

if TYPE_CHECKING:
    from structlog.typing import BindableLogger, EventDict, Processor

ErrorPayload = dict[str, Any]


class StructlogConfig:
    """structlog 配置核心类.

    负责配置 structlog 的处理器链、上下文注入与日志工厂.
    `configure` 可以多次调用,处理器链只会初始化一次.

    Example:
        >>> config = StructlogConfig()
        >>> config.configure(app)
        >>> logger = get_logger('my_module')

    """

    def __init__(self) -> None:
        self.configured = False

    def configure(self, app: Flask | None = None) -> None:
        """初始化 structlog 处理器(幂等).

        Args:
            app: Flask 应用实例,可选.提供时注册请求级上下文钩子.

        """
        if not self.configured:
            processors = [
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.stdlib.add_log_level,
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                self._add_request_context,
                self._add_user_context,
                self._add_global_context,
                self._get_console_renderer(),
            ]
            structlog.configure(
                processors=cast("list[Processor]", processors),
                context_class=dict,
                logger_factory=structlog.stdlib.LoggerFactory(),
                wrapper_class=structlog.stdlib.BoundLogger,
                cache_logger_on_first_use=True,
            )
            self.configured = True

        if app is not None:
            self._attach_app(app)

    @staticmethod
    def _attach_app(app: Flask) -> None:
        """为每个请求绑定 request_id / user_id 上下文变量."""

        @app.before_request
        def bind_request_context() -> None:
            incoming = request.headers.get(HttpHeaders.X_REQUEST_ID)
            request_id_var.set(incoming or uuid4().hex)
            user_id: int | None = None
            with suppress(RuntimeError):
                if getattr(current_user, "is_authenticated", False):
                    user_id = getattr(current_user, "id", None)
            user_id_var.set(user_id)

    @staticmethod
    def _add_request_context(
        _logger: BindableLogger,
        _method_name: str,
        event_dict: EventDict,
    ) -> EventDict:
        """向事件字典写入 request_id/user_id/path."""
        if has_request_context():
            event_dict["request_id"] = request_id_var.get()
            event_dict["user_id"] = user_id_var.get()
            event_dict.setdefault("path", request.path)
        return event_dict

    @staticmethod
    def _add_user_context(
        _logger: BindableLogger,
        _method_name: str,
        event_dict: EventDict,
    ) -> EventDict:
        """附加当前登录用户."""
        with suppress(RuntimeError):
            if current_user and getattr(current_user, "is_authenticated", False):
                event_dict["current_username"] = getattr(current_user, "username", None)
        return event_dict

    @staticmethod
    def _add_global_context(
        _logger: BindableLogger,
        _method_name: str,
        event_dict: EventDict,
    ) -> EventDict:
        """附加应用名、版本等全局上下文."""
        try:
            event_dict["app_name"] = current_app.config["APP_NAME"]
            event_dict["app_version"] = current_app.config["APP_VERSION"]
        except (RuntimeError, KeyError):
            event_dict["app_name"] = "导航主页"
            event_dict["app_version"] = APP_VERSION

        event_dict["logger_name"] = getattr(_logger, "name", "unknown")
        return event_dict

    @staticmethod
    def _get_console_renderer() -> Processor:
        """根据终端能力返回渲染器."""
        return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


structlog_config = StructlogConfig()


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """获取结构化日志记录器.

    Args:
        name: 日志记录器名称,通常使用模块名.

    Returns:
        绑定的 structlog 日志记录器实例.

    Example:
        >>> logger = get_logger('my_module')
        >>> logger.info('操作成功', site_id=123)

    """
    structlog_config.configure()
    return structlog.get_logger(name)


def configure_structlog(app: Flask) -> None:
    """配置 structlog 并注册 Flask 钩子.

    Args:
        app: Flask 应用实例.

    """
    structlog_config.configure(app)

    @app.teardown_appcontext
    def log_teardown_error(exception: BaseException | None) -> None:
        if exception:
            get_logger("app").error("应用请求处理异常", module="system", exception=str(exception))


def log_info(message: str, module: str = "app", **kwargs: Any) -> None:
    """记录信息级别日志.

    Example:
        >>> log_info('首页缓存已写入', module='home_cache', visibility='public')

    """
    get_logger("app").info(message, module=module, **kwargs)


def log_warning(
    message: str,
    module: str = "app",
    exception: BaseException | None = None,
    **kwargs: Any,
) -> None:
    """记录警告级别日志,可附带异常文本."""
    logger = get_logger("app")
    if exception:
        logger.warning(message, module=module, exception=str(exception), **kwargs)
    else:
        logger.warning(message, module=module, **kwargs)


def log_error(
    message: str,
    module: str = "app",
    exception: BaseException | None = None,
    **kwargs: Any,
) -> None:
    """记录错误级别日志.

    Args:
        message: 日志消息.
        module: 模块名称,默认为 'app'.
        exception: 可选的异常对象,提供时附带异常类型与文本.
        **kwargs: 额外的上下文信息.

    """
    logger = get_logger("app")
    if exception:
        logger.error(
            message,
            module=module,
            error=str(exception),
            error_type=exception.__class__.__name__,
            **kwargs,
        )
    else:
        logger.error(message, module=module, **kwargs)


def log_debug(message: str, module: str = "app", **kwargs: Any) -> None:
    """记录调试级别日志."""
    get_logger("app").debug(message, module=module, **kwargs)


def get_system_logger() -> structlog.stdlib.BoundLogger:
    """返回系统级 logger."""
    return get_logger("system")


def get_auth_logger() -> structlog.stdlib.BoundLogger:
    """返回认证模块 logger."""
    return get_logger("auth")


def enhanced_error_handler(
    error: Exception,
    context: ErrorContext | None = None,
    *,
    extra: dict[str, Any] | None = None,
) -> ErrorPayload:
    """将异常转换为结构化错误载荷并按严重度输出日志.

    Args:
        error: 异常对象.
        context: 错误上下文,可选.如果未提供会自动创建.
        extra: 额外的上下文信息,可选.

    Returns:
        ErrorPayload: 包含 error_id、category、severity、message 等字段的字典.

    """
    context = context or ErrorContext(error)
    context.ensure_request()
    metadata = derive_error_metadata(error)

    payload: ErrorPayload = {
        "error": True,
        "error_id": context.error_id,
        "category": metadata.category.value,
        "severity": metadata.severity.value,
        "message_code": metadata.message_key,
        "message": metadata.message,
        "timestamp": context.timestamp.isoformat(),
        "recoverable": metadata.recoverable,
        "context": context.public_payload(),
    }
    if extra:
        payload["extra"] = dict(extra)

    _log_enhanced_error(error, metadata, payload)
    return payload


def _log_enhanced_error(error: Exception, metadata: ErrorMetadata, payload: ErrorPayload) -> None:
    log_kwargs = {
        "error_id": payload["error_id"],
        "category": payload["category"],
        "severity": payload["severity"],
    }
    message_text = str(payload.get("message", ""))
    if metadata.severity in (ErrorSeverity.HIGH, ErrorSeverity.CRITICAL):
        log_error(message_text, module="error_handler", exception=error, **log_kwargs)
    else:
        log_warning(message_text, module="error_handler", exception=error, **log_kwargs)


__all__ = [
    "ErrorContext",
    "ErrorMetadata",
    "configure_structlog",
    "enhanced_error_handler",
    "get_auth_logger",
    "get_logger",
    "get_system_logger",
    "log_debug",
    "log_error",
    "log_info",
    "log_warning",
]
