"""导航主页 - 首页路由.

首页按登录状态分为 public / private 两类快照缓存:

- 仅无查询参数的 GET / 读写缓存,其余请求直接计算并标记 BYPASS;
- 按记住的上次分类渲染的页面因访客而异,同样标记 BYPASS 且不写入快照;
- 已登录请求携带 `iori_cache_stale=1` 时先失效两类快照,跳过缓存读取,并在响应中清除该 Cookie;
- 未命中时的缓存写入延迟到响应关闭之后执行,不占用响应时间.
"""

from __future__ import annotations

from flask import Blueprint, Response, current_app, request
from flask_login import current_user

from navhome.constants import CookieNames, HttpHeaders, HttpStatus
from navhome.constants.system_constants import ErrorMessages
from navhome.errors import DatabaseError
from navhome.services.cache.home_cache_service import VisibilityClass, home_snapshot_cache
from navhome.services.home.home_page_service import HomePageService
from navhome.services.home.visibility_resolver import ALL_CATEGORIES, CATALOG_PARAM
from navhome.types.home import HomeSnapshot
from navhome.utils.structlog_config import get_logger

home_bp = Blueprint("home", __name__)

_home_service = HomePageService()
logger = get_logger("home")

CACHE_HIT = "HIT"
CACHE_MISS = "MISS"
CACHE_BYPASS = "BYPASS"
STALE_FLAG = "1"
REMEMBER_COOKIE_MAX_AGE = 365 * 24 * 3600


def _html_response(body: str, cache_state: str, status: int = HttpStatus.OK) -> Response:
    response = Response(body, status=status, mimetype="text/html")
    response.headers[HttpHeaders.X_CACHE] = cache_state
    return response


def _schedule_snapshot_write(response: Response, visibility: VisibilityClass, html: str) -> None:
    """响应关闭后写入快照,在独立的应用上下文中执行."""
    app = current_app._get_current_object()  # type: ignore[attr-defined]

    def _populate() -> None:
        with app.app_context():
            home_snapshot_cache.put(visibility, html)

    response.call_on_close(_populate)


def _remember_category(response: Response, snapshot: HomeSnapshot) -> None:
    """显式切换分类且开启记忆时,写入上次分类 Cookie."""
    if not request.args.get(CATALOG_PARAM):
        return
    remember = snapshot.settings.get("home_remember_last_category")
    if remember is not True:
        return
    selected = snapshot.content.selected_category
    value = str(selected.id) if selected is not None else ALL_CATEGORIES
    response.set_cookie(
        CookieNames.LAST_CATEGORY,
        value,
        max_age=REMEMBER_COOKIE_MAX_AGE,
        path="/",
        samesite="Lax",
    )


@home_bp.route("/")
def index() -> Response:
    """渲染首页.

    Returns:
        Response: 首页 HTML,`X-Cache` 标识命中情况;书签读取失败时返回 500 纯文本.

    """
    authenticated = bool(current_user.is_authenticated)
    visibility = VisibilityClass.for_request(authenticated=authenticated)
    eligible = request.method == "GET" and not request.query_string
    # 过期信号只对管理员生效,匿名请求携带时按普通请求处理
    stale = eligible and authenticated and request.cookies.get(CookieNames.CACHE_STALE) == STALE_FLAG

    if stale:
        logger.info("收到缓存过期信号,失效全部首页快照", visibility=visibility.value)
        home_snapshot_cache.invalidate_all()
    elif eligible:
        cached = home_snapshot_cache.get(visibility)
        if cached is not None:
            return _html_response(cached, CACHE_HIT)

    try:
        snapshot = _home_service.build_snapshot(
            authenticated=authenticated,
            request_params=request.args,
            cookies=request.cookies,
        )
    except DatabaseError:
        return Response(
            ErrorMessages.SITES_FETCH_FAILED,
            status=HttpStatus.INTERNAL_SERVER_ERROR,
            mimetype="text/plain",
        )

    html = _home_service.render(snapshot)
    # 按访客 Cookie 选中分类的结果不是该可见性类的标准页面,不写入共享快照
    cacheable = eligible and not snapshot.content.personalized
    response = _html_response(html, CACHE_MISS if cacheable else CACHE_BYPASS)

    if stale:
        response.delete_cookie(CookieNames.CACHE_STALE, path="/", samesite="Lax")
    if cacheable:
        _schedule_snapshot_write(response, visibility, html)
    _remember_category(response, snapshot)
    return response
