"""导航主页 - 公开接口与配置导出路由."""

from __future__ import annotations

import json

from flask import Blueprint, Response, request
from flask.typing import ResponseReturnValue
from flask_login import current_user

from navhome import db
from navhome.constants import HttpHeaders, HttpStatus
from navhome.constants.system_constants import SuccessMessages
from navhome.services.config.public_config_service import PublicConfigService
from navhome.services.pending_sites.submission_service import SubmissionService
from navhome.utils.decorators import admin_required
from navhome.utils.request_utils import client_ip, get_json_payload
from navhome.utils.response_utils import jsonify_unified_success
from navhome.utils.route_safety import safe_route_call

public_bp = Blueprint("public", __name__)

_config_service = PublicConfigService()
_submission_service = SubmissionService()

EXPORT_FILENAME = "config.json"


@public_bp.route("/public-config", methods=["GET"])
def public_config() -> ResponseReturnValue:
    """前端公开配置."""

    def _execute() -> ResponseReturnValue:
        return jsonify_unified_success(data=_config_service.public_config())

    return safe_route_call(
        _execute,
        module="public",
        action="public_config",
        public_error="获取公开配置失败",
        context={"endpoint": "public_config"},
    )


@public_bp.route("/config/<int:site_id>", methods=["GET"])
def site_detail(site_id: int) -> ResponseReturnValue:
    """读取单条书签,私密书签仅对已登录用户可见."""

    def _execute() -> ResponseReturnValue:
        data = _config_service.get_site(site_id, authenticated=bool(current_user.is_authenticated))
        return jsonify_unified_success(data=data)

    return safe_route_call(
        _execute,
        module="public",
        action="site_detail",
        public_error="获取书签失败",
        context={"site_id": site_id},
    )


@public_bp.route("/config/submit", methods=["POST"])
def submit_site() -> ResponseReturnValue:
    """公共提交书签,进入待审核列表."""
    ip_address = client_ip()

    def _execute() -> ResponseReturnValue:
        pending = _submission_service.submit(get_json_payload(), client_ip=ip_address)
        db.session.commit()
        return jsonify_unified_success(
            data={"pending": pending.to_dict()},
            message=SuccessMessages.SUBMISSION_RECEIVED,
            status=HttpStatus.CREATED,
        )

    return safe_route_call(
        _execute,
        module="public",
        action="submit_site",
        public_error="提交失败",
        context={"client_ip": ip_address},
    )


@public_bp.route("/config/export", methods=["GET"])
@admin_required
def export_config() -> ResponseReturnValue:
    """导出分类与书签为 JSON 附件.

    Query Parameters:
        include_private: 为 "true" 时包含私密分类与书签.

    """
    include_private = request.args.get("include_private") == "true"

    def _execute() -> ResponseReturnValue:
        payload = _config_service.export(include_private=include_private)
        response = Response(
            json.dumps(payload, ensure_ascii=False, indent=2),
            mimetype="application/json",
        )
        response.headers[HttpHeaders.CONTENT_DISPOSITION] = f'attachment; filename="{EXPORT_FILENAME}"'
        return response

    return safe_route_call(
        _execute,
        module="public",
        action="export_config",
        public_error="导出失败",
        context={"include_private": include_private},
    )
