import pytest

from navhome.services.home.category_tree import build_tree, iter_nodes
from navhome.services.home.visibility_resolver import compute_effective_privacy, resolve_visible_content


def _site(site_id, category_id, *, private=False):
    return {"id": site_id, "name": f"site-{site_id}", "url": "https://example.com", "category": category_id, "private": private}


@pytest.mark.unit
def test_anonymous_request_hides_inherited_private_subtree(dev_tools_categories) -> None:
    forest = build_tree(dev_tools_categories)

    content = resolve_visible_content(forest, [_site(10, 2)], authenticated=False)

    assert content.visible_forest == []
    assert content.visible_sites == []
    assert content.selected_category is None


@pytest.mark.unit
def test_authenticated_request_sees_nested_private_subtree(dev_tools_categories) -> None:
    forest = build_tree(dev_tools_categories)

    content = resolve_visible_content(forest, [_site(10, 2)], authenticated=True)

    assert [node.id for node in content.visible_forest] == [1]
    assert [child.id for child in content.visible_forest[0].children] == [2]
    assert [site.id for site in content.visible_sites] == [10]


@pytest.mark.unit
def test_private_flag_propagates_to_every_descendant() -> None:
    forest = build_tree(
        [
            {"id": 1, "name": "root", "private": True},
            {"id": 2, "name": "child", "parent": 1, "private": False},
            {"id": 3, "name": "grandchild", "parent": 2, "private": False},
            {"id": 4, "name": "public", "private": False},
        ],
    )

    effective = compute_effective_privacy(forest)

    assert effective == {1: True, 2: True, 3: True, 4: False}


@pytest.mark.unit
def test_effective_privacy_is_not_written_back_to_nodes(dev_tools_categories) -> None:
    forest = build_tree(dev_tools_categories)

    resolve_visible_content(forest, [], authenticated=False)

    tools = next(node for node in iter_nodes(forest) if node.id == 2)
    assert tools.is_private is False


@pytest.mark.unit
@pytest.mark.parametrize("own_flag", [True, False])
def test_site_in_private_category_follows_authentication(dev_tools_categories, own_flag) -> None:
    forest = build_tree(dev_tools_categories)
    sites = [_site(10, 2, private=own_flag)]

    anonymous = resolve_visible_content(forest, sites, authenticated=False)
    admin = resolve_visible_content(forest, sites, authenticated=True)

    assert anonymous.visible_sites == []
    assert [site.id for site in admin.visible_sites] == [10]


@pytest.mark.unit
def test_own_private_flag_hides_site_in_public_category() -> None:
    forest = build_tree([{"id": 1, "name": "Public"}])
    sites = [_site(10, 1, private=True), _site(11, 1)]

    content = resolve_visible_content(forest, sites, authenticated=False)

    assert [site.id for site in content.visible_sites] == [11]


@pytest.mark.unit
def test_explicit_category_parameter_filters_direct_sites_only() -> None:
    forest = build_tree([{"id": 1, "name": "Parent"}, {"id": 2, "name": "Child", "parent": 1}])
    sites = [_site(10, 1), _site(11, 2)]

    content = resolve_visible_content(forest, sites, authenticated=False, request_params={"catalog": "Parent"})

    assert content.selected_category is not None
    assert content.selected_category.id == 1
    assert [site.id for site in content.visible_sites] == [10]


@pytest.mark.unit
def test_unknown_category_parameter_degrades_to_no_filter() -> None:
    forest = build_tree([{"id": 1, "name": "A"}, {"id": 2, "name": "B"}])
    sites = [_site(10, 1), _site(11, 2)]

    content = resolve_visible_content(forest, sites, authenticated=False, request_params={"catalog": "Missing"})

    assert content.selected_category is None
    assert [site.id for site in content.visible_sites] == [10, 11]


@pytest.mark.unit
def test_private_category_parameter_degrades_for_anonymous(dev_tools_categories) -> None:
    forest = build_tree([*dev_tools_categories, {"id": 3, "name": "Open"}])
    sites = [_site(10, 2), _site(11, 3)]

    content = resolve_visible_content(forest, sites, authenticated=False, request_params={"catalog": "Tools"})

    assert content.selected_category is None
    assert [site.id for site in content.visible_sites] == [11]


@pytest.mark.unit
def test_literal_all_ignores_default_category() -> None:
    forest = build_tree([{"id": 1, "name": "A"}, {"id": 2, "name": "B"}])
    sites = [_site(10, 1), _site(11, 2)]

    content = resolve_visible_content(
        forest,
        sites,
        authenticated=False,
        request_params={"catalog": "all"},
        settings={"home_default_category": "A"},
    )

    assert content.selected_category is None
    assert len(content.visible_sites) == 2


@pytest.mark.unit
def test_remembered_category_cookie_used_when_enabled() -> None:
    forest = build_tree([{"id": 1, "name": "A"}, {"id": 2, "name": "B"}])
    sites = [_site(10, 1), _site(11, 2)]
    settings = {"home_remember_last_category": True, "home_default_category": "A"}

    content = resolve_visible_content(
        forest,
        sites,
        authenticated=False,
        settings=settings,
        cookies={"iori_last_category": "2"},
    )

    assert content.selected_category is not None
    assert content.selected_category.id == 2


@pytest.mark.unit
def test_remembered_cookie_ignored_when_setting_disabled() -> None:
    forest = build_tree([{"id": 1, "name": "A"}, {"id": 2, "name": "B"}])

    content = resolve_visible_content(
        forest,
        [],
        authenticated=False,
        settings={"home_remember_last_category": False, "home_default_category": "A"},
        cookies={"iori_last_category": "2"},
    )

    assert content.selected_category is not None
    assert content.selected_category.id == 1


@pytest.mark.unit
def test_remembered_all_means_no_filter() -> None:
    forest = build_tree([{"id": 1, "name": "A"}])

    content = resolve_visible_content(
        forest,
        [],
        authenticated=False,
        settings={"home_remember_last_category": True, "home_default_category": "A"},
        cookies={"iori_last_category": "all"},
    )

    assert content.selected_category is None


@pytest.mark.unit
def test_default_category_must_be_visible() -> None:
    forest = build_tree([{"id": 1, "name": "Secret", "private": True}, {"id": 2, "name": "Open"}])

    anonymous = resolve_visible_content(forest, [], authenticated=False, settings={"home_default_category": "Secret"})
    admin = resolve_visible_content(forest, [], authenticated=True, settings={"home_default_category": "Secret"})

    assert anonymous.selected_category is None
    assert admin.selected_category is not None
    assert admin.selected_category.id == 1


@pytest.mark.unit
def test_site_order_is_preserved() -> None:
    forest = build_tree([{"id": 1, "name": "A"}])
    sites = [_site(12, 1), _site(10, 1), _site(11, 1)]

    content = resolve_visible_content(forest, sites, authenticated=True)

    assert [site.id for site in content.visible_sites] == [12, 10, 11]
