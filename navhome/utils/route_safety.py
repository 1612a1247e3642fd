"""路由安全执行与结构化日志助手.

提供 `log_with_context` 与 `safe_route_call` 两个 helper,用于复用结构化日志字段,
并集中处理视图层的异常捕获,杜绝裸 `Exception` 与分散的 try/except 模板.
"""

from __future__ import annotations

from typing import Any, Callable, Literal, TypeVar

from flask_login import current_user
from werkzeug.exceptions import HTTPException

from navhome import db
from navhome.errors import AppError, SystemError
from navhome.utils.structlog_config import get_logger

R = TypeVar("R")
LogLevel = Literal["debug", "info", "warning", "error", "critical"]
DEFAULT_EXPECTED_EXCEPTIONS: tuple[type[BaseException], ...] = (AppError, HTTPException)


def log_with_context(
    level: LogLevel,
    event: str,
    *,
    module: str,
    action: str,
    context: dict[str, Any] | None = None,
    extra: dict[str, Any] | None = None,
    include_actor: bool = True,
) -> None:
    """记录带有统一上下文字段的结构化日志.

    Args:
        level: 日志级别,使用 structlog 的方法名,例如 "info"、"error".
        event: 日志事件描述,建议使用动词短语.
        module: 所属模块或领域,用于快速过滤.
        action: 当前操作名称,通常对应视图函数名.
        context: 业务上下文字段.
        extra: 附加字段.
        include_actor: 是否附带当前登录用户 ID.

    """
    logger = get_logger("app")
    payload: dict[str, Any] = {"module": module, "action": action}

    if include_actor:
        try:
            actor_id = getattr(current_user, "id", None)
        except RuntimeError:
            actor_id = None
        if actor_id is not None:
            payload.setdefault("actor_id", actor_id)

    if context:
        payload.update(context)
    if extra:
        payload.update(extra)

    log_method = getattr(logger, level, logger.error)
    log_method(event, **payload)


def safe_route_call(
    func: Callable[..., R],
    *,
    module: str,
    action: str,
    public_error: str,
    func_args: tuple[Any, ...] | None = None,
    func_kwargs: dict[str, Any] | None = None,
    context: dict[str, Any] | None = None,
    expected_exceptions: tuple[type[BaseException], ...] | None = None,
    fallback_exception: type[AppError] = SystemError,
    log_event: str | None = None,
) -> R:
    """安全执行视图逻辑,集中处理日志与异常转换.

    Args:
        func: 真实的业务函数,建议为局部闭包以捕获参数.
        module: 记录日志用的模块名称.
        action: 业务动作名称,例如 "create_site".
        public_error: 暴露给客户端的统一错误文案.
        func_args: 传入业务函数的位置参数.
        func_kwargs: 传入业务函数的命名参数字典.
        context: 日志上下文.
        expected_exceptions: 额外视为"预期"的异常类型,原样向上抛出.
        fallback_exception: 非预期异常的包装类型.
        log_event: 自定义日志事件名.

    Returns:
        业务函数的执行结果,通常是 Flask 的响应对象.

    Raises:
        AppError: 当业务逻辑主动抛出或 fallback_exception 包装时.

    """
    handled_exceptions = DEFAULT_EXPECTED_EXCEPTIONS
    if expected_exceptions:
        handled_exceptions += expected_exceptions

    event = log_event or f"{action}执行失败"
    context_payload = dict(context or {})

    try:
        return func(*(func_args or ()), **(func_kwargs or {}))
    except handled_exceptions as exc:
        db.session.rollback()
        log_with_context(
            "warning",
            event,
            module=module,
            action=action,
            context=context_payload,
            extra={"error_type": exc.__class__.__name__, "error_message": str(exc)},
        )
        raise
    except Exception as exc:
        db.session.rollback()
        log_with_context(
            "error",
            event,
            module=module,
            action=action,
            context=context_payload,
            extra={"error_type": exc.__class__.__name__, "unexpected": True},
        )
        raise fallback_exception(public_error) from exc
