"""分类写操作 Service.

职责:
- 处理分类的创建/更新/删除编排
- 校验名称唯一、父级存在且不成环
- 重命名时同步书签上冗余的分类名称
- 不返回 Response、不 commit,首页缓存由路由在 commit 后统一失效
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError

from navhome import db
from navhome.constants.system_constants import ErrorMessages
from navhome.errors import ConflictError, NotFoundError, ValidationError
from navhome.models.category import DEFAULT_SORT_ORDER, ROOT_PARENT_ID, Category
from navhome.repositories.categories_repository import CategoriesRepository
from navhome.repositories.sites_repository import SitesRepository
from navhome.services.home.category_tree import build_tree, iter_nodes, normalize_sort_order
from navhome.types.converters import as_bool, as_int, as_str
from navhome.utils.route_safety import log_with_context

MAX_NAME_LENGTH = 100


@dataclass(slots=True)
class CategoryPayload:
    """规范化后的分类字段."""

    name: str
    sort_order: int
    parent_id: int
    is_private: bool


class CategoryWriteService:
    """分类写操作服务."""

    def __init__(
        self,
        repository: CategoriesRepository | None = None,
        sites_repository: SitesRepository | None = None,
    ) -> None:
        self._repository = repository or CategoriesRepository()
        self._sites = sites_repository or SitesRepository()

    def list_tree(self) -> list[dict]:
        """返回管理端使用的完整分类森林(含私密分类)."""
        return [node.to_dict() for node in build_tree(self._repository.list_all())]

    def create(self, payload: Mapping[str, object], *, operator_id: int | None = None) -> Category:
        """创建分类."""
        normalized = self._validate(payload, resource=None)
        category = Category(
            name=normalized.name,
            sort_order=normalized.sort_order,
            parent_id=normalized.parent_id,
            is_private=normalized.is_private,
        )
        try:
            self._repository.add(category)
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise ValidationError("保存失败,请稍后再试", extra={"exception": str(exc)}) from exc

        log_with_context(
            "info",
            "创建分类",
            module="categories",
            action="create_category",
            context={"category_id": category.id, "operator_id": operator_id},
            extra={"name": category.name, "parent_id": category.parent_id, "is_private": category.is_private},
        )
        return category

    def update(self, category_id: int, payload: Mapping[str, object], *, operator_id: int | None = None) -> Category:
        """更新分类,名称变更时同步书签冗余字段."""
        category = self._get_or_raise(category_id)
        normalized = self._validate(payload, resource=category)
        renamed = normalized.name != category.name

        category.name = normalized.name
        category.sort_order = normalized.sort_order
        category.parent_id = normalized.parent_id
        category.is_private = normalized.is_private

        try:
            self._repository.add(category)
            synced = self._sites.rename_category(category.id, category.name) if renamed else 0
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise ValidationError("保存失败,请稍后再试", extra={"exception": str(exc)}) from exc

        log_with_context(
            "info",
            "更新分类",
            module="categories",
            action="update_category",
            context={"category_id": category.id, "operator_id": operator_id},
            extra={"renamed": renamed, "synced_sites": synced, "is_private": category.is_private},
        )
        return category

    def delete(self, category_id: int, *, operator_id: int | None = None) -> None:
        """删除分类,仍有子分类或书签时拒绝."""
        category = self._get_or_raise(category_id)
        children = self._repository.count_children(category_id)
        sites = self._repository.count_sites(category_id)
        if children or sites:
            raise ConflictError(
                ErrorMessages.CATEGORY_NOT_EMPTY,
                extra={"category_id": category_id, "children": children, "sites": sites},
            )

        self._repository.delete(category)
        log_with_context(
            "info",
            "删除分类",
            module="categories",
            action="delete_category",
            context={"category_id": category_id, "operator_id": operator_id},
            extra={"name": category.name},
        )

    def _get_or_raise(self, category_id: int) -> Category:
        category = self._repository.get_by_id(category_id)
        if category is None:
            raise NotFoundError(ErrorMessages.CATEGORY_NOT_FOUND, extra={"category_id": category_id})
        return category

    def _validate(self, payload: Mapping[str, object], *, resource: Category | None) -> CategoryPayload:
        name = as_str(payload.get("name")).strip()
        if not name:
            raise ValidationError(ErrorMessages.MISSING_REQUIRED_FIELDS.format(fields="name"))
        if len(name) > MAX_NAME_LENGTH:
            raise ValidationError(f"分类名称不能超过{MAX_NAME_LENGTH}个字符")

        existing = self._repository.get_by_name(name)
        if existing is not None and (resource is None or existing.id != resource.id):
            raise ConflictError("分类名称已存在", extra={"name": name})

        default_parent = resource.parent_id if resource is not None else ROOT_PARENT_ID
        parent_id = as_int(payload.get("parent_id"), default=default_parent) or ROOT_PARENT_ID
        if parent_id != ROOT_PARENT_ID:
            self._validate_parent(parent_id, resource)

        sort_order = normalize_sort_order(payload.get("sort_order", DEFAULT_SORT_ORDER))
        default_private = bool(resource.is_private) if resource is not None else False
        return CategoryPayload(
            name=name,
            sort_order=int(sort_order),
            parent_id=parent_id,
            is_private=as_bool(payload.get("is_private"), default=default_private),
        )

    def _validate_parent(self, parent_id: int, resource: Category | None) -> None:
        if self._repository.get_by_id(parent_id) is None:
            raise ValidationError(ErrorMessages.CATEGORY_PARENT_INVALID, extra={"parent_id": parent_id})
        if resource is None:
            return
        if parent_id == resource.id:
            raise ValidationError(ErrorMessages.CATEGORY_PARENT_INVALID, extra={"parent_id": parent_id})

        forest = build_tree(self._repository.list_all())
        for node in iter_nodes(forest):
            if node.id != resource.id:
                continue
            descendants = {child.id for child in iter_nodes(node.children)}
            if parent_id in descendants:
                raise ValidationError(
                    ErrorMessages.CATEGORY_PARENT_INVALID,
                    extra={"parent_id": parent_id, "reason": "cycle"},
                )
            break
