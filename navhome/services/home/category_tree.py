"""分类树构建.

职责:
- 将扁平分类行组装为森林,父分类不存在时视为根节点
- 同级按 (sort_order, id) 递归排序,缺失或非有限的排序值归一为 9999
- 纯内存计算,不做 Query、不做私密性判断
"""

from __future__ import annotations

import math
from collections.abc import Iterable

from navhome.types.home import UNSET_SORT_ORDER, CategoryNode, CategoryRecord


def normalize_sort_order(value: object) -> int | float:
    """归一化排序值.

    Args:
        value: 原始排序值,可能为 None、字符串、NaN 等.

    Returns:
        int | float: 有限数值原样返回(整数值返回 int),其余返回 9999.

    """
    if value is None or isinstance(value, bool):
        return UNSET_SORT_ORDER
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return UNSET_SORT_ORDER
    if not math.isfinite(number):
        return UNSET_SORT_ORDER
    return int(number) if number.is_integer() else number


def _sort_key(node: CategoryNode) -> tuple[int | float, int]:
    return (node.sort_order, node.id)


def _sort_recursively(nodes: list[CategoryNode]) -> None:
    stack = [nodes]
    while stack:
        siblings = stack.pop()
        siblings.sort(key=_sort_key)
        stack.extend(node.children for node in siblings if node.children)


def _find_cycle_breakers(index: dict[int, CategoryNode]) -> set[int]:
    """找出父链成环的分类,每个环取最小 ID 提升为根."""
    breakers: set[int] = set()
    resolved: set[int] = set()
    for start in index:
        path: list[int] = []
        position: dict[int, int] = {}
        current: int | None = start
        while current is not None and current in index and current not in resolved:
            if current in position:
                breakers.add(min(path[position[current] :]))
                break
            position[current] = len(path)
            path.append(current)
            parent_id = index[current].parent_id
            current = parent_id if parent_id and parent_id != current else None
        resolved.update(path)
    return breakers


def build_tree(flat_categories: Iterable[object]) -> list[CategoryNode]:
    """构建分类森林.

    Args:
        flat_categories: 扁平分类集合,元素可为 CategoryRecord、ORM 对象或字典,顺序无关.

    Returns:
        list[CategoryNode]: 已排序的根节点列表,每个节点携带 children.

    """
    index: dict[int, CategoryNode] = {}
    for raw in flat_categories:
        record = raw if isinstance(raw, CategoryRecord) else CategoryRecord.from_source(raw)
        index[record.id] = CategoryNode(
            id=record.id,
            name=record.name,
            sort_order=normalize_sort_order(record.sort_order),
            parent_id=record.parent_id,
            is_private=record.is_private,
        )

    breakers = _find_cycle_breakers(index)
    roots: list[CategoryNode] = []
    for node in index.values():
        parent = index.get(node.parent_id) if node.parent_id else None
        if parent is None or parent is node or node.id in breakers:
            roots.append(node)
        else:
            parent.children.append(node)

    _sort_recursively(roots)
    return roots


def iter_nodes(forest: Iterable[CategoryNode]) -> Iterable[CategoryNode]:
    """深度优先遍历森林中的全部节点."""
    stack = list(forest)
    stack.reverse()
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))
