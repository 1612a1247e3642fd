"""导航主页 - 分类管理路由."""

from __future__ import annotations

from flask import Blueprint
from flask.typing import ResponseReturnValue
from flask_login import current_user

from navhome import db
from navhome.constants import HttpStatus
from navhome.constants.system_constants import SuccessMessages
from navhome.services.cache.home_cache_service import invalidate_home_cache
from navhome.services.categories.category_write_service import CategoryWriteService
from navhome.utils.decorators import admin_required
from navhome.utils.request_utils import get_json_payload
from navhome.utils.response_utils import jsonify_unified_success
from navhome.utils.route_safety import safe_route_call

categories_bp = Blueprint("categories", __name__)

_category_service = CategoryWriteService()


@categories_bp.route("", methods=["GET"])
@admin_required
def list_categories() -> ResponseReturnValue:
    """返回完整分类森林(含私密分类)."""

    def _execute() -> ResponseReturnValue:
        return jsonify_unified_success(data={"categories": _category_service.list_tree()})

    return safe_route_call(
        _execute,
        module="categories",
        action="list_categories",
        public_error="获取分类列表失败",
    )


@categories_bp.route("", methods=["POST"])
@admin_required
def create_category() -> ResponseReturnValue:
    """创建分类."""
    operator_id = getattr(current_user, "id", None)

    def _execute() -> ResponseReturnValue:
        category = _category_service.create(get_json_payload(), operator_id=operator_id)
        db.session.commit()
        invalidate_home_cache()
        return jsonify_unified_success(
            data={"category": category.to_dict()},
            message=SuccessMessages.CATEGORY_CREATED,
            status=HttpStatus.CREATED,
        )

    return safe_route_call(
        _execute,
        module="categories",
        action="create_category",
        public_error="创建分类失败",
        context={"operator_id": operator_id},
    )


@categories_bp.route("/<int:category_id>", methods=["PUT"])
@admin_required
def update_category(category_id: int) -> ResponseReturnValue:
    """更新分类."""
    operator_id = getattr(current_user, "id", None)

    def _execute() -> ResponseReturnValue:
        category = _category_service.update(category_id, get_json_payload(), operator_id=operator_id)
        db.session.commit()
        invalidate_home_cache()
        return jsonify_unified_success(data={"category": category.to_dict()}, message=SuccessMessages.CATEGORY_UPDATED)

    return safe_route_call(
        _execute,
        module="categories",
        action="update_category",
        public_error="更新分类失败",
        context={"category_id": category_id},
    )


@categories_bp.route("/<int:category_id>", methods=["DELETE"])
@admin_required
def delete_category(category_id: int) -> ResponseReturnValue:
    """删除分类,仅允许删除空分类."""
    operator_id = getattr(current_user, "id", None)

    def _execute() -> ResponseReturnValue:
        _category_service.delete(category_id, operator_id=operator_id)
        db.session.commit()
        invalidate_home_cache()
        return jsonify_unified_success(data={"category_id": category_id}, message=SuccessMessages.CATEGORY_DELETED)

    return safe_route_call(
        _execute,
        module="categories",
        action="delete_category",
        public_error="删除分类失败",
        context={"category_id": category_id},
    )
