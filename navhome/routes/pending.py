"""导航主页 - 待审核书签路由."""

from __future__ import annotations

from flask import Blueprint
from flask.typing import ResponseReturnValue
from flask_login import current_user

from navhome import db
from navhome.constants import HttpStatus
from navhome.constants.system_constants import SuccessMessages
from navhome.services.cache.home_cache_service import invalidate_home_cache
from navhome.services.pending_sites.submission_service import SubmissionService
from navhome.utils.decorators import admin_required
from navhome.utils.response_utils import jsonify_unified_success
from navhome.utils.route_safety import safe_route_call

pending_bp = Blueprint("pending", __name__)

_submission_service = SubmissionService()


@pending_bp.route("", methods=["GET"])
@admin_required
def list_pending() -> ResponseReturnValue:
    def _execute() -> ResponseReturnValue:
        return jsonify_unified_success(data={"pending": _submission_service.list_pending()})

    return safe_route_call(
        _execute,
        module="pending_sites",
        action="list_pending",
        public_error="获取待审核列表失败",
    )


@pending_bp.route("/<int:pending_id>/approve", methods=["POST"])
@admin_required
def approve_pending(pending_id: int) -> ResponseReturnValue:
    """审核通过并写入书签."""
    operator_id = getattr(current_user, "id", None)

    def _execute() -> ResponseReturnValue:
        site = _submission_service.approve(pending_id, operator_id=operator_id)
        db.session.commit()
        invalidate_home_cache()
        return jsonify_unified_success(
            data={"site": site.to_dict()},
            message=SuccessMessages.PENDING_APPROVED,
            status=HttpStatus.CREATED,
        )

    return safe_route_call(
        _execute,
        module="pending_sites",
        action="approve_pending",
        public_error="审核失败",
        context={"pending_id": pending_id},
    )


@pending_bp.route("/<int:pending_id>", methods=["DELETE"])
@admin_required
def reject_pending(pending_id: int) -> ResponseReturnValue:
    """拒绝提交,暂存记录直接删除."""
    operator_id = getattr(current_user, "id", None)

    def _execute() -> ResponseReturnValue:
        _submission_service.reject(pending_id, operator_id=operator_id)
        db.session.commit()
        return jsonify_unified_success(data={"pending_id": pending_id}, message=SuccessMessages.PENDING_REJECTED)

    return safe_route_call(
        _execute,
        module="pending_sites",
        action="reject_pending",
        public_error="拒绝提交失败",
        context={"pending_id": pending_id},
    )
