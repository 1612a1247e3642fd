"""首页组装 Service.

职责:
- 分别读取分类、设置、书签,单一数据源失败时按来源降级
- 串联分类树构建与可见性解析,产出可直接渲染的 HomeSnapshot
- 不做缓存判定、不返回 Response
"""

from __future__ import annotations

from collections.abc import Mapping

from flask import current_app, render_template
from sqlalchemy.exc import SQLAlchemyError

from navhome import db
from navhome.constants.system_constants import ErrorMessages
from navhome.errors import DatabaseError
from navhome.repositories.categories_repository import CategoriesRepository
from navhome.repositories.settings_repository import SettingsRepository
from navhome.repositories.sites_repository import SitesRepository
from navhome.services.home.category_tree import build_tree
from navhome.services.home.visibility_resolver import resolve_visible_content
from navhome.services.settings.settings_resolver import default_settings, resolve_settings, settings_keys
from navhome.types.home import CategoryRecord, HomeSnapshot, SiteRecord
from navhome.utils.structlog_config import log_error, log_warning

HOME_TEMPLATE = "index.html"


class HomePageService:
    """首页数据编排服务."""

    def __init__(
        self,
        categories_repository: CategoriesRepository | None = None,
        sites_repository: SitesRepository | None = None,
        settings_repository: SettingsRepository | None = None,
    ) -> None:
        self._categories = categories_repository or CategoriesRepository()
        self._sites = sites_repository or SitesRepository()
        self._settings = settings_repository or SettingsRepository()

    def load_categories(self) -> list[CategoryRecord]:
        """读取全部分类,失败时降级为空列表."""
        try:
            return [CategoryRecord.from_source(row) for row in self._categories.list_all()]
        except SQLAlchemyError as exc:
            db.session.rollback()
            log_warning("读取分类失败,首页降级为无分类", module="home", exception=exc)
            return []

    def load_settings(self) -> dict[str, bool | str]:
        """读取主页设置,失败时降级为全部默认值."""
        try:
            rows = self._settings.list_by_keys(settings_keys())
        except SQLAlchemyError as exc:
            db.session.rollback()
            log_warning("读取主页设置失败,使用默认设置", module="home", exception=exc)
            return default_settings()
        return resolve_settings(rows)

    def load_sites(self) -> list[SiteRecord]:
        """读取全部书签.

        书签列表是首页唯一不可降级的数据源.

        Raises:
            DatabaseError: 读取失败时抛出.

        """
        try:
            return [SiteRecord.from_source(row) for row in self._sites.list_all()]
        except SQLAlchemyError as exc:
            db.session.rollback()
            log_error("读取书签失败", module="home", exception=exc)
            raise DatabaseError(ErrorMessages.SITES_FETCH_FAILED, extra={"reason": str(exc)}) from exc

    def build_snapshot(
        self,
        *,
        authenticated: bool,
        request_params: Mapping[str, str] | None = None,
        cookies: Mapping[str, str] | None = None,
    ) -> HomeSnapshot:
        """读取数据并解析当前身份可见的首页内容.

        Args:
            authenticated: 请求是否已登录.
            request_params: 请求查询参数.
            cookies: 请求 Cookie.

        Returns:
            HomeSnapshot: 交给模板渲染的首页数据.

        Raises:
            DatabaseError: 书签读取失败时抛出.

        """
        categories = self.load_categories()
        settings = self.load_settings()
        sites = self.load_sites()

        forest = build_tree(categories)
        content = resolve_visible_content(
            forest,
            sites,
            authenticated,
            request_params=request_params,
            settings=settings,
            cookies=cookies,
        )

        config = current_app.config
        return HomeSnapshot(
            content=content,
            settings=settings,
            authenticated=authenticated,
            site_name=str(settings.get("home_site_name") or config.get("SITE_NAME", "")),
            site_description=str(settings.get("home_site_description") or config.get("SITE_DESCRIPTION", "")),
            footer_text=str(config.get("FOOTER_TEXT", "")),
            total_sites=len(content.visible_sites),
        )

    @staticmethod
    def render(snapshot: HomeSnapshot) -> str:
        """渲染首页 HTML."""
        return render_template(
            HOME_TEMPLATE,
            snapshot=snapshot,
            content=snapshot.content,
            settings=snapshot.settings,
        )
