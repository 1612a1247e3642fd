import math

import pytest

from navhome.services.home.category_tree import build_tree, iter_nodes, normalize_sort_order


def _ids(nodes):
    return [node.id for node in nodes]


@pytest.mark.unit
def test_dangling_parent_becomes_root() -> None:
    forest = build_tree([{"id": 5, "name": "Orphan", "parent_id": 42}])

    assert _ids(forest) == [5]
    assert forest[0].children == []


@pytest.mark.unit
def test_children_attach_to_parent_regardless_of_input_order() -> None:
    forest = build_tree(
        [
            {"id": 3, "name": "Child", "parent_id": 1},
            {"id": 1, "name": "Root", "parent_id": 0},
            {"id": 4, "name": "Grandchild", "parent_id": 3},
        ],
    )

    assert _ids(forest) == [1]
    assert _ids(forest[0].children) == [3]
    assert _ids(forest[0].children[0].children) == [4]


@pytest.mark.unit
def test_siblings_sort_by_sort_order_then_id() -> None:
    forest = build_tree(
        [
            {"id": 4, "name": "d", "sort_order": 2},
            {"id": 2, "name": "b", "sort_order": 1},
            {"id": 3, "name": "c", "sort_order": 1},
            {"id": 1, "name": "a"},
        ],
    )

    assert _ids(forest) == [2, 3, 4, 1]


@pytest.mark.unit
def test_child_lists_are_sorted_recursively() -> None:
    forest = build_tree(
        [
            {"id": 1, "name": "root"},
            {"id": 9, "name": "late", "parent_id": 1, "sort_order": 5},
            {"id": 8, "name": "early", "parent_id": 1, "sort_order": 1},
        ],
    )

    assert _ids(forest[0].children) == [8, 9]


@pytest.mark.unit
@pytest.mark.parametrize("raw", [None, "abc", math.nan, math.inf, True])
def test_unusable_sort_order_normalizes_to_sentinel(raw) -> None:
    assert normalize_sort_order(raw) == 9999


@pytest.mark.unit
def test_numeric_strings_are_accepted_as_sort_order() -> None:
    assert normalize_sort_order("3") == 3
    assert normalize_sort_order(2.5) == 2.5


@pytest.mark.unit
def test_unset_sort_orders_sort_last_by_id() -> None:
    forest = build_tree(
        [
            {"id": 7, "name": "x", "sort_order": math.nan},
            {"id": 6, "name": "y", "sort_order": None},
            {"id": 8, "name": "z", "sort_order": 10},
        ],
    )

    assert _ids(forest) == [8, 6, 7]


@pytest.mark.unit
def test_self_parent_is_treated_as_root() -> None:
    forest = build_tree([{"id": 1, "name": "loop", "parent_id": 1}])

    assert _ids(forest) == [1]


@pytest.mark.unit
def test_parent_cycle_is_broken_without_losing_nodes() -> None:
    forest = build_tree(
        [
            {"id": 1, "name": "a", "parent_id": 2},
            {"id": 2, "name": "b", "parent_id": 1},
            {"id": 3, "name": "c", "parent_id": 2},
        ],
    )

    assert sorted(node.id for node in iter_nodes(forest)) == [1, 2, 3]
    assert _ids(forest) == [1]
    assert _ids(forest[0].children) == [2]
    assert _ids(forest[0].children[0].children) == [3]


@pytest.mark.unit
def test_iter_nodes_is_depth_first_in_sorted_order() -> None:
    forest = build_tree(
        [
            {"id": 1, "name": "a", "sort_order": 1},
            {"id": 2, "name": "b", "sort_order": 2},
            {"id": 3, "name": "a1", "parent_id": 1},
        ],
    )

    assert [node.id for node in iter_nodes(forest)] == [1, 3, 2]
