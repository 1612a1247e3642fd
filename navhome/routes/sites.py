"""导航主页 - 书签管理路由."""

from __future__ import annotations

from flask import Blueprint
from flask.typing import ResponseReturnValue
from flask_login import current_user

from navhome import db
from navhome.constants import HttpStatus
from navhome.constants.system_constants import SuccessMessages
from navhome.services.cache.home_cache_service import invalidate_home_cache
from navhome.services.sites.site_write_service import SiteWriteService
from navhome.utils.decorators import admin_required
from navhome.utils.request_utils import get_json_payload
from navhome.utils.response_utils import jsonify_unified_success
from navhome.utils.route_safety import safe_route_call

sites_bp = Blueprint("sites", __name__)

_site_service = SiteWriteService()


@sites_bp.route("", methods=["GET"])
@admin_required
def list_sites() -> ResponseReturnValue:
    def _execute() -> ResponseReturnValue:
        return jsonify_unified_success(data={"sites": _site_service.list_all()})

    return safe_route_call(
        _execute,
        module="sites",
        action="list_sites",
        public_error="获取书签列表失败",
    )


@sites_bp.route("", methods=["POST"])
@admin_required
def create_site() -> ResponseReturnValue:
    """创建书签."""
    operator_id = getattr(current_user, "id", None)

    def _execute() -> ResponseReturnValue:
        site = _site_service.create(get_json_payload(), operator_id=operator_id)
        db.session.commit()
        invalidate_home_cache()
        return jsonify_unified_success(
            data={"site": site.to_dict()},
            message=SuccessMessages.SITE_CREATED,
            status=HttpStatus.CREATED,
        )

    return safe_route_call(
        _execute,
        module="sites",
        action="create_site",
        public_error="创建书签失败",
        context={"operator_id": operator_id},
    )


@sites_bp.route("/<int:site_id>", methods=["PUT"])
@admin_required
def update_site(site_id: int) -> ResponseReturnValue:
    """整体更新书签."""
    operator_id = getattr(current_user, "id", None)

    def _execute() -> ResponseReturnValue:
        site = _site_service.update(site_id, get_json_payload(), operator_id=operator_id)
        db.session.commit()
        invalidate_home_cache()
        return jsonify_unified_success(data={"site": site.to_dict()}, message=SuccessMessages.SITE_UPDATED)

    return safe_route_call(
        _execute,
        module="sites",
        action="update_site",
        public_error="更新书签失败",
        context={"site_id": site_id},
    )


@sites_bp.route("/<int:site_id>", methods=["DELETE"])
@admin_required
def delete_site(site_id: int) -> ResponseReturnValue:
    operator_id = getattr(current_user, "id", None)

    def _execute() -> ResponseReturnValue:
        _site_service.delete(site_id, operator_id=operator_id)
        db.session.commit()
        invalidate_home_cache()
        return jsonify_unified_success(data={"site_id": site_id}, message=SuccessMessages.SITE_DELETED)

    return safe_route_call(
        _execute,
        module="sites",
        action="delete_site",
        public_error="删除书签失败",
        context={"site_id": site_id},
    )
