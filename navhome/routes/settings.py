"""导航主页 - 主页设置路由."""

from __future__ import annotations

from flask import Blueprint
from flask.typing import ResponseReturnValue
from flask_login import current_user

from navhome import db
from navhome.constants.system_constants import SuccessMessages
from navhome.services.cache.home_cache_service import invalidate_home_cache
from navhome.services.settings.settings_write_service import SettingsWriteService
from navhome.utils.decorators import admin_required
from navhome.utils.request_utils import get_json_payload
from navhome.utils.response_utils import jsonify_unified_success
from navhome.utils.route_safety import safe_route_call

settings_bp = Blueprint("settings", __name__)

_settings_service = SettingsWriteService()


@settings_bp.route("", methods=["GET"])
@admin_required
def get_settings() -> ResponseReturnValue:
    def _execute() -> ResponseReturnValue:
        return jsonify_unified_success(data={"settings": _settings_service.current()})

    return safe_route_call(
        _execute,
        module="settings",
        action="get_settings",
        public_error="获取设置失败",
    )


@settings_bp.route("", methods=["POST"])
@admin_required
def save_settings() -> ResponseReturnValue:
    """批量写入设置,未知键忽略."""
    operator_id = getattr(current_user, "id", None)

    def _execute() -> ResponseReturnValue:
        saved = _settings_service.save(get_json_payload(), operator_id=operator_id)
        db.session.commit()
        invalidate_home_cache()
        return jsonify_unified_success(
            data={"saved": saved, "settings": _settings_service.current()},
            message=SuccessMessages.SETTINGS_SAVED,
        )

    return safe_route_call(
        _execute,
        module="settings",
        action="save_settings",
        public_error="保存设置失败",
        context={"operator_id": operator_id},
    )
