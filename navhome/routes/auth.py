"""导航主页 - 管理员认证路由."""

from __future__ import annotations

from flask import Blueprint, redirect, render_template, request, url_for
from flask.typing import ResponseReturnValue
from flask_login import current_user, logout_user

from navhome import db
from navhome.constants import HttpStatus
from navhome.constants.system_constants import SuccessMessages
from navhome.errors import AuthenticationError, AuthorizationError, RateLimitError
from navhome.services.auth.login_service import LoginService
from navhome.utils.request_utils import client_ip
from navhome.utils.response_utils import jsonify_unified_success
from navhome.utils.route_safety import safe_route_call
from navhome.utils.structlog_config import get_auth_logger

auth_bp = Blueprint("auth", __name__)

_login_service = LoginService()
auth_logger = get_auth_logger()


@auth_bp.route("/login", methods=["GET", "POST"])
def login() -> ResponseReturnValue:
    """管理员登录.

    GET 渲染登录页面;POST 接受表单或 JSON,JSON 请求返回统一封套,
    表单请求成功后重定向到首页.
    """
    if request.method == "GET":
        if current_user.is_authenticated:
            return redirect(url_for("home.index"))
        return render_template("auth/login.html")

    ip_address = client_ip()

    if request.is_json:

        def _execute() -> ResponseReturnValue:
            result = _login_service.login_from_payload(request.get_json(silent=True), client_ip=ip_address)
            db.session.commit()
            return jsonify_unified_success(data=result.to_payload(), message=SuccessMessages.LOGIN_SUCCESS)

        return safe_route_call(
            _execute,
            module="auth",
            action="login",
            public_error="登录失败",
            context={"ip_address": ip_address},
        )

    try:
        _login_service.login_from_payload(request.form.to_dict(), client_ip=ip_address)
    except (AuthenticationError, AuthorizationError, RateLimitError) as exc:
        db.session.rollback()
        return render_template("auth/login.html", error=exc.message), exc.status_code
    db.session.commit()
    return redirect(url_for("home.index"))


@auth_bp.route("/logout")
def logout() -> ResponseReturnValue:
    """登出并返回首页."""
    if current_user.is_authenticated:
        auth_logger.info(
            "用户登出",
            module="auth",
            user_id=current_user.id,
            ip_address=request.remote_addr,
        )
    logout_user()
    if request.is_json:
        return jsonify_unified_success(message=SuccessMessages.LOGOUT_SUCCESS, status=HttpStatus.OK)
    return redirect(url_for("home.index"))
