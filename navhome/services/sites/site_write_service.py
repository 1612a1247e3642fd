"""书签写操作 Service.

职责:
- 处理书签的创建/更新/删除编排
- 规范化字段,缺省图标按域名回落到图标服务
- 保存时冗余分类名称,所属分类有效私密时强制标记为私密
- 不返回 Response、不 commit
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from urllib.parse import urlsplit

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from navhome import db
from navhome.constants.system_constants import ErrorMessages
from navhome.errors import NotFoundError, ValidationError
from navhome.models.category import Category
from navhome.models.site import Site
from navhome.repositories.categories_repository import CategoriesRepository
from navhome.repositories.sites_repository import SitesRepository
from navhome.services.home.category_tree import build_tree, normalize_sort_order
from navhome.services.home.visibility_resolver import compute_effective_privacy
from navhome.types.converters import as_bool, as_int, as_optional_str, as_str
from navhome.utils.route_safety import log_with_context

DEFAULT_ICON_API = "https://favicon.im/"
LARGER_ICON_SUFFIX = "?larger=true"


def fallback_logo(url: str, icon_api: str | None = None) -> str | None:
    """根据书签地址生成默认图标地址.

    Args:
        url: 书签地址,仅 http/https 生效.
        icon_api: 图标服务前缀,未配置时使用默认服务并追加大图参数.

    Returns:
        str | None: 图标地址,无法解析域名时返回 None.

    """
    if not url.startswith(("http://", "https://")):
        return None
    domain = urlsplit(url).netloc
    if not domain:
        return None
    if icon_api and icon_api != DEFAULT_ICON_API:
        return f"{icon_api}{domain}"
    return f"{DEFAULT_ICON_API}{domain}{LARGER_ICON_SUFFIX}"


@dataclass(slots=True)
class SitePayload:
    """规范化后的书签字段."""

    name: str
    url: str
    logo: str | None
    description: str | None
    category_id: int
    category_name: str
    sort_order: int
    is_private: bool


class SiteWriteService:
    """书签写操作服务."""

    def __init__(
        self,
        repository: SitesRepository | None = None,
        categories_repository: CategoriesRepository | None = None,
    ) -> None:
        self._repository = repository or SitesRepository()
        self._categories = categories_repository or CategoriesRepository()

    def list_all(self) -> list[dict]:
        return [site.to_dict() for site in self._repository.list_all()]

    def create(self, payload: Mapping[str, object], *, operator_id: int | None = None) -> Site:
        """创建书签."""
        normalized = self.normalize(payload)
        site = Site(
            name=normalized.name,
            url=normalized.url,
            logo=normalized.logo,
            description=normalized.description,
            category_id=normalized.category_id,
            category_name=normalized.category_name,
            sort_order=normalized.sort_order,
            is_private=normalized.is_private,
        )
        self._save(site)
        log_with_context(
            "info",
            "创建书签",
            module="sites",
            action="create_site",
            context={"site_id": site.id, "operator_id": operator_id},
            extra={"category_id": site.category_id, "is_private": site.is_private},
        )
        return site

    def update(self, site_id: int, payload: Mapping[str, object], *, operator_id: int | None = None) -> Site:
        """整体更新书签."""
        site = self._repository.get_by_id(site_id)
        if site is None:
            raise NotFoundError(ErrorMessages.SITE_NOT_FOUND, extra={"site_id": site_id})

        normalized = self.normalize(payload)
        site.name = normalized.name
        site.url = normalized.url
        site.logo = normalized.logo
        site.description = normalized.description
        site.category_id = normalized.category_id
        site.category_name = normalized.category_name
        site.sort_order = normalized.sort_order
        site.is_private = normalized.is_private
        self._save(site)
        log_with_context(
            "info",
            "更新书签",
            module="sites",
            action="update_site",
            context={"site_id": site.id, "operator_id": operator_id},
            extra={"category_id": site.category_id, "is_private": site.is_private},
        )
        return site

    def delete(self, site_id: int, *, operator_id: int | None = None) -> None:
        site = self._repository.get_by_id(site_id)
        if site is None:
            raise NotFoundError(ErrorMessages.SITE_NOT_FOUND, extra={"site_id": site_id})
        self._repository.delete(site)
        log_with_context(
            "info",
            "删除书签",
            module="sites",
            action="delete_site",
            context={"site_id": site_id, "operator_id": operator_id},
        )

    def normalize(self, payload: Mapping[str, object]) -> SitePayload:
        """校验并规范化书签字段,供创建、更新与审核通过复用.

        Raises:
            ValidationError: 名称、地址或分类缺失,或分类不存在时抛出.

        """
        name = as_str(payload.get("name")).strip()
        url = as_str(payload.get("url")).strip()
        category_id = as_int(payload.get("category_id"))
        if not name or not url or not category_id:
            raise ValidationError(ErrorMessages.MISSING_REQUIRED_FIELDS.format(fields="name, url, category_id"))

        category = self._categories.get_by_id(category_id)
        if category is None:
            raise ValidationError(ErrorMessages.CATEGORY_NOT_FOUND, extra={"category_id": category_id})

        logo = as_optional_str(payload.get("logo"))
        if logo is None:
            logo = fallback_logo(url, current_app.config.get("ICON_API"))

        is_private = as_bool(payload.get("is_private")) or self._category_is_private(category)
        return SitePayload(
            name=name,
            url=url,
            logo=logo,
            description=as_optional_str(payload.get("description")),
            category_id=category.id,
            category_name=category.name,
            sort_order=int(normalize_sort_order(payload.get("sort_order"))),
            is_private=is_private,
        )

    def _category_is_private(self, category: Category) -> bool:
        if category.is_private:
            return True
        effective = compute_effective_privacy(build_tree(self._categories.list_all()))
        return effective.get(category.id, False)

    def _save(self, site: Site) -> None:
        try:
            self._repository.add(site)
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise ValidationError("保存失败,请稍后再试", extra={"exception": str(exc)}) from exc
