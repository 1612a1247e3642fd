"""导航主页 - 首页缓存管理路由."""

from __future__ import annotations

from flask import Blueprint
from flask.typing import ResponseReturnValue
from flask_login import current_user

from navhome.constants.system_constants import SuccessMessages
from navhome.errors import SystemError
from navhome.services.cache.home_cache_service import invalidate_home_cache
from navhome.utils.decorators import admin_required
from navhome.utils.response_utils import jsonify_unified_success
from navhome.utils.route_safety import safe_route_call

cache_bp = Blueprint("cache", __name__)


@cache_bp.route("/clear", methods=["POST"])
@admin_required
def clear_home_cache() -> ResponseReturnValue:
    """同时清除 public 与 private 首页快照."""

    def _execute() -> ResponseReturnValue:
        if not invalidate_home_cache():
            raise SystemError("清除首页缓存失败")
        return jsonify_unified_success(message=SuccessMessages.HOME_CACHE_CLEARED)

    return safe_route_call(
        _execute,
        module="cache",
        action="clear_home_cache",
        public_error="清除首页缓存失败",
        context={"operator_id": getattr(current_user, "id", None)},
    )
