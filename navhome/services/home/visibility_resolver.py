"""首页可见性解析.

职责:
- 一次深度优先遍历计算每个分类的有效私密性(自身标记 OR 任一祖先标记)
- 按登录状态裁剪分类森林与书签列表,书签的私密性在读取时按所属分类重新计算
- 按 请求参数 > 记住的上次分类 > 默认分类 > 不过滤 的顺序确定当前分类

有效私密性只在单次渲染内使用,不回写存储.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import replace

from navhome.constants import CookieNames
from navhome.services.home.category_tree import iter_nodes
from navhome.types.home import CategoryNode, CategorySelection, SelectionSource, SiteRecord, VisibleContent
from navhome.utils.structlog_config import log_debug

CATALOG_PARAM = "catalog"
ALL_CATEGORIES = "all"
LAST_CATEGORY_COOKIE = CookieNames.LAST_CATEGORY
_LAST_CATEGORY_PATTERN = re.compile(r"^(all|\d+)$")


def compute_effective_privacy(forest: Iterable[CategoryNode]) -> dict[int, bool]:
    """计算森林中每个分类的有效私密性.

    Args:
        forest: build_tree 产出的分类森林.

    Returns:
        dict[int, bool]: 分类 ID 到有效私密性的映射.

    """
    effective: dict[int, bool] = {}
    stack: list[tuple[CategoryNode, bool]] = [(node, False) for node in forest]
    while stack:
        node, inherited = stack.pop()
        is_private = inherited or bool(node.is_private)
        effective[node.id] = is_private
        stack.extend((child, is_private) for child in node.children)
    return effective


def _prune_private(forest: list[CategoryNode], effective: Mapping[int, bool]) -> list[CategoryNode]:
    """返回去掉有效私密分类(连同子树)后的森林副本."""
    visible: list[CategoryNode] = []
    for node in forest:
        if effective.get(node.id, False):
            continue
        visible.append(replace(node, children=_prune_private(node.children, effective)))
    return visible


def is_site_private(site: SiteRecord, effective: Mapping[int, bool]) -> bool:
    """书签自身为私密,或所属分类有效私密时视为私密."""
    return bool(site.is_private) or effective.get(site.category_id, False)


def _find_by_name(forest: list[CategoryNode], name: str) -> CategoryNode | None:
    for node in iter_nodes(forest):
        if node.name == name:
            return node
    return None


def _find_by_id(forest: list[CategoryNode], category_id: int) -> CategoryNode | None:
    for node in iter_nodes(forest):
        if node.id == category_id:
            return node
    return None


def _as_bool(value: object) -> bool:
    if isinstance(value, str):
        return value == "true"
    return bool(value)


def select_category(
    visible_forest: list[CategoryNode],
    request_params: Mapping[str, str],
    settings: Mapping[str, object],
    cookies: Mapping[str, str] | None = None,
) -> CategorySelection:
    """确定当前选中的分类及其来源.

    优先级:
        1. 请求参数 catalog,字面量 all(不区分大小写)表示不过滤;
        2. 未显式指定且开启 home_remember_last_category 时,读取 Cookie 中记录的分类 ID 或 all;
        3. home_default_category 设置;
        4. 不过滤.

    显式参数无法解析为可见分类时直接退化为不过滤,不再回落到 Cookie 或默认分类.

    Returns:
        CategorySelection: 选中的可见分类(None 表示不过滤)与来源.

    """
    requested = (request_params.get(CATALOG_PARAM) or "").strip()
    if requested:
        if requested.lower() == ALL_CATEGORIES:
            return CategorySelection(None, SelectionSource.PARAM)
        selected = _find_by_name(visible_forest, requested)
        # TODO: 未知分类目前退化为全部书签,待确认是否改为展示"分类不存在"提示.
        if selected is None:
            log_debug("请求的分类不可见,退化为全部", module="home", catalog=requested)
        return CategorySelection(selected, SelectionSource.PARAM)

    if _as_bool(settings.get("home_remember_last_category", False)):
        remembered = ((cookies or {}).get(LAST_CATEGORY_COOKIE) or "").strip()
        match = _LAST_CATEGORY_PATTERN.match(remembered)
        if match:
            if match.group(1) == ALL_CATEGORIES:
                return CategorySelection(None, SelectionSource.COOKIE)
            selected = _find_by_id(visible_forest, int(match.group(1)))
            if selected is not None:
                return CategorySelection(selected, SelectionSource.COOKIE)

    default_name = str(settings.get("home_default_category") or "").strip()
    if default_name:
        selected = _find_by_name(visible_forest, default_name)
        if selected is not None:
            return CategorySelection(selected, SelectionSource.DEFAULT)
    return CategorySelection(None)


def resolve_visible_content(
    forest: list[CategoryNode],
    sites: Iterable[object],
    authenticated: bool,
    request_params: Mapping[str, str] | None = None,
    settings: Mapping[str, object] | None = None,
    cookies: Mapping[str, str] | None = None,
) -> VisibleContent:
    """解析当前身份可见的分类、书签与选中分类.

    Args:
        forest: 完整分类森林.
        sites: 书签集合,元素可为 SiteRecord、ORM 对象或字典,保持传入顺序.
        authenticated: 请求是否已登录.
        request_params: 请求查询参数.
        settings: 已解析的主页设置.
        cookies: 请求 Cookie.

    Returns:
        VisibleContent: 可见森林、过滤后的书签、选中分类与有效私密性映射.

    """
    effective = compute_effective_privacy(forest)
    records = [site if isinstance(site, SiteRecord) else SiteRecord.from_source(site) for site in sites]

    if authenticated:
        visible_forest = forest
        visible_sites = records
    else:
        visible_forest = _prune_private(forest, effective)
        visible_sites = [site for site in records if not is_site_private(site, effective)]

    selection = select_category(visible_forest, request_params or {}, settings or {}, cookies)
    selected = selection.category
    if selected is not None:
        visible_sites = [site for site in visible_sites if site.category_id == selected.id]

    return VisibleContent(
        visible_forest=visible_forest,
        visible_sites=visible_sites,
        selected_category=selected,
        effective_privacy=effective,
        selection_source=selection.source,
    )
