"""
导航主页 - 装饰器工具
"""

from functools import wraps
from typing import Any

from flask import redirect, request, url_for
from flask_login import current_user

from navhome.constants.system_constants import ErrorMessages
from navhome.errors import AuthenticationError
from navhome.utils.structlog_config import get_system_logger


def _wants_json() -> bool:
    return request.is_json or request.path.startswith("/api/")


def admin_required(f: Any) -> Any:  # noqa: ANN401
    """确保被装饰函数仅允许已登录管理员访问的装饰器。

    API 请求未登录时抛出 AuthenticationError,页面请求重定向到登录页。

    Args:
        f: 被装饰的函数。

    Returns:
        装饰后的函数。

    Raises:
        AuthenticationError: 当用户未认证时抛出（API 请求）。
    """

    @wraps(f)
    def decorated_function(*args, **kwargs: Any) -> Any:  # noqa: ANN401
        if not current_user.is_authenticated:
            get_system_logger().warning(
                "未认证访问管理员功能",
                module="decorators",
                request_path=request.path,
                request_method=request.method,
                ip_address=request.remote_addr,
                user_agent=request.headers.get("User-Agent", ""),
                failure_reason="not_authenticated",
            )
            if _wants_json():
                raise AuthenticationError(
                    ErrorMessages.AUTHENTICATION_REQUIRED,
                    message_key="AUTHENTICATION_REQUIRED",
                    extra={"request_path": request.path, "request_method": request.method},
                )
            return redirect(url_for("auth.login"))
        return f(*args, **kwargs)

    return decorated_function

