"""首页渲染相关类型定义."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

ROOT_PARENT_ID = 0
UNSET_SORT_ORDER = 9999


def _read(source: object, key: str, default: Any = None) -> Any:
    if isinstance(source, Mapping):
        return source.get(key, default)
    return getattr(source, key, default)


def _as_int(value: object, default: int) -> int:
    if value is None or isinstance(value, bool):
        return default
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default


@dataclass(slots=True)
class CategoryRecord:
    """扁平分类行,sort_order 保留原始值,由建树时统一归一化."""

    id: int
    name: str
    sort_order: object = UNSET_SORT_ORDER
    parent_id: int = ROOT_PARENT_ID
    is_private: bool = False

    @classmethod
    def from_source(cls, source: object) -> CategoryRecord:
        """从 ORM 对象或字典构造,兼容 `parent` / `private` 简写键."""
        parent = _read(source, "parent_id", _read(source, "parent", ROOT_PARENT_ID))
        private = _read(source, "is_private", _read(source, "private", False))
        return cls(
            id=int(_read(source, "id")),
            name=str(_read(source, "name", "") or ""),
            sort_order=_read(source, "sort_order", UNSET_SORT_ORDER),
            parent_id=_as_int(parent, ROOT_PARENT_ID),
            is_private=bool(private),
        )


@dataclass(slots=True)
class CategoryNode:
    id: int
    name: str
    sort_order: int | float
    parent_id: int
    is_private: bool
    children: list[CategoryNode] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "sort_order": self.sort_order,
            "parent_id": self.parent_id,
            "is_private": self.is_private,
            "children": [child.to_dict() for child in self.children],
        }


@dataclass(slots=True)
class SiteRecord:
    id: int
    name: str
    url: str
    category_id: int
    logo: str | None = None
    description: str | None = None
    category_name: str | None = None
    sort_order: object = UNSET_SORT_ORDER
    is_private: bool = False

    @classmethod
    def from_source(cls, source: object) -> SiteRecord:
        """从 ORM 对象或字典构造,兼容 `category` / `private` 简写键."""
        category = _read(source, "category_id", _read(source, "category", ROOT_PARENT_ID))
        private = _read(source, "is_private", _read(source, "private", False))
        return cls(
            id=int(_read(source, "id")),
            name=str(_read(source, "name", "") or ""),
            url=str(_read(source, "url", "") or ""),
            category_id=_as_int(category, ROOT_PARENT_ID),
            logo=_read(source, "logo"),
            description=_read(source, "description"),
            category_name=_read(source, "category_name"),
            sort_order=_read(source, "sort_order", UNSET_SORT_ORDER),
            is_private=bool(private),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "url": self.url,
            "logo": self.logo,
            "description": self.description,
            "category_id": self.category_id,
            "category_name": self.category_name,
            "sort_order": self.sort_order,
            "is_private": self.is_private,
        }


class SelectionSource(str, Enum):
    """选中分类的来源."""

    PARAM = "param"
    COOKIE = "cookie"
    DEFAULT = "default"
    NONE = "none"


@dataclass(frozen=True, slots=True)
class CategorySelection:
    category: CategoryNode | None
    source: SelectionSource = SelectionSource.NONE


@dataclass(slots=True)
class VisibleContent:
    """可见性解析结果.

    Attributes:
        visible_forest: 当前身份可见的分类森林.
        visible_sites: 已按所选分类过滤的可见书签.
        selected_category: 选中的分类,None 表示不过滤.
        effective_privacy: 分类 ID 到有效私密性的映射,仅用于本次渲染.
        selection_source: 选中分类的来源,来自 Cookie 时结果因访客而异.

    """

    visible_forest: list[CategoryNode]
    visible_sites: list[SiteRecord]
    selected_category: CategoryNode | None
    effective_privacy: dict[int, bool] = field(default_factory=dict)
    selection_source: SelectionSource = SelectionSource.NONE

    @property
    def personalized(self) -> bool:
        """是否应用了访客自己的上次分类记录,此类结果不能作为共享快照."""
        return self.selection_source is SelectionSource.COOKIE


@dataclass(slots=True)
class HomeSnapshot:
    """交给模板层渲染的完整首页数据."""

    content: VisibleContent
    settings: dict[str, bool | str]
    authenticated: bool
    site_name: str
    site_description: str
    footer_text: str
    total_sites: int
