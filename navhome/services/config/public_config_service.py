"""公开配置与单条书签读取 Service.

职责:
- 组装前端需要的公开配置(主页设置 + 提交开关)
- 按登录状态读取单条书签,私密书签对匿名访问者表现为不存在
- 导出分类与书签,可选是否包含私密内容
"""

from __future__ import annotations

from flask import current_app

from navhome.constants.system_constants import ErrorMessages
from navhome.errors import NotFoundError
from navhome.repositories.categories_repository import CategoriesRepository
from navhome.repositories.settings_repository import SettingsRepository
from navhome.repositories.sites_repository import SitesRepository
from navhome.services.home.category_tree import build_tree
from navhome.services.home.visibility_resolver import compute_effective_privacy, is_site_private
from navhome.services.settings.settings_resolver import resolve_settings, settings_keys
from navhome.types.home import SiteRecord


class PublicConfigService:
    """公开配置读取服务."""

    def __init__(
        self,
        settings_repository: SettingsRepository | None = None,
        sites_repository: SitesRepository | None = None,
        categories_repository: CategoriesRepository | None = None,
    ) -> None:
        self._settings = settings_repository or SettingsRepository()
        self._sites = sites_repository or SitesRepository()
        self._categories = categories_repository or CategoriesRepository()

    def public_config(self) -> dict[str, object]:
        config = current_app.config
        return {
            "submissionEnabled": bool(config.get("ENABLE_PUBLIC_SUBMISSION", False)),
            "aiRequestDelay": int(config.get("AI_REQUEST_DELAY", 1500)),
            "settings": resolve_settings(self._settings.list_by_keys(settings_keys())),
        }

    def get_site(self, site_id: int, *, authenticated: bool) -> dict[str, object]:
        """读取单条书签.

        Raises:
            NotFoundError: 书签不存在,或匿名访问有效私密的书签.

        """
        site = self._sites.get_by_id(site_id)
        if site is None:
            raise NotFoundError(ErrorMessages.SITE_NOT_FOUND, extra={"site_id": site_id})
        if not authenticated:
            effective = compute_effective_privacy(build_tree(self._categories.list_all()))
            if is_site_private(SiteRecord.from_source(site), effective):
                raise NotFoundError(ErrorMessages.SITE_NOT_FOUND, extra={"site_id": site_id})
        return site.to_dict()

    def export(self, *, include_private: bool) -> dict[str, list[dict]]:
        """导出分类与书签.

        不包含私密内容时,按有效私密性过滤,私密分类下的书签一并排除.
        """
        categories = self._categories.list_all()
        sites = self._sites.list_all()
        if include_private:
            return {
                "category": [category.to_dict() for category in categories],
                "sites": [site.to_dict() for site in sites],
            }

        effective = compute_effective_privacy(build_tree(categories))
        return {
            "category": [category.to_dict() for category in categories if not effective.get(category.id, False)],
            "sites": [
                site.to_dict() for site in sites if not is_site_private(SiteRecord.from_source(site), effective)
            ],
        }
