"""管理端 API 契约测试."""

import json

import pytest

from navhome import db
from navhome.models.category import Category
from navhome.models.setting import Setting
from navhome.models.site import Site
from navhome.services.cache.home_cache_service import VisibilityClass, home_snapshot_cache


@pytest.mark.unit
@pytest.mark.parametrize(
    ("method", "path"),
    [
        ("get", "/api/categories"),
        ("post", "/api/categories"),
        ("post", "/api/sites"),
        ("post", "/api/settings"),
        ("get", "/api/pending"),
        ("post", "/api/cache/clear"),
        ("get", "/api/config/export"),
    ],
)
def test_admin_endpoints_require_login(client, method, path) -> None:
    response = getattr(client, method)(path, json={})

    assert response.status_code == 401
    payload = response.get_json()
    assert payload["success"] is False
    assert payload["message"] == "请先登录"


@pytest.mark.unit
def test_list_categories_returns_full_tree(auth_client, seeded) -> None:
    response = auth_client.get("/api/categories")

    assert response.status_code == 200
    categories = response.get_json()["data"]["categories"]
    assert [node["name"] for node in categories] == ["Dev", "Open"]
    assert categories[0]["children"][0]["name"] == "Tools"


@pytest.mark.unit
def test_list_sites_returns_private_and_public_sites(auth_client, seeded) -> None:
    """管理端列表不按私密过滤,私密分类下的书签也要返回."""
    response = auth_client.get("/api/sites")

    assert response.status_code == 200
    names = {site["name"] for site in response.get_json()["data"]["sites"]}
    assert names == {"SecretTool", "OpenSite"}


@pytest.mark.unit
def test_create_category_defaults(app, auth_client) -> None:
    response = auth_client.post("/api/categories", json={"name": "News"})

    assert response.status_code == 201
    category = response.get_json()["data"]["category"]
    assert category["sort_order"] == 9999
    assert category["parent_id"] == 0
    assert category["is_private"] is False


@pytest.mark.unit
def test_create_category_rejects_duplicate_name(auth_client, seeded) -> None:
    response = auth_client.post("/api/categories", json={"name": "Open"})

    assert response.status_code == 409


@pytest.mark.unit
def test_create_category_rejects_unknown_parent(auth_client) -> None:
    response = auth_client.post("/api/categories", json={"name": "Child", "parent_id": 404})

    assert response.status_code == 400


@pytest.mark.unit
def test_update_category_rejects_descendant_as_parent(auth_client, seeded) -> None:
    response = auth_client.put("/api/categories/1", json={"name": "Dev", "parent_id": 2})

    assert response.status_code == 400
    with auth_client.application.app_context():
        assert db.session.get(Category, 1).parent_id == 0


@pytest.mark.unit
def test_rename_category_syncs_site_category_name(app, auth_client, seeded) -> None:
    response = auth_client.put("/api/categories/3", json={"name": "Public"})

    assert response.status_code == 200
    with app.app_context():
        assert db.session.get(Site, 11).category_name == "Public"


@pytest.mark.unit
def test_delete_non_empty_category_conflicts(auth_client, seeded) -> None:
    with_children = auth_client.delete("/api/categories/1")
    with_sites = auth_client.delete("/api/categories/3")

    assert with_children.status_code == 409
    assert with_sites.status_code == 409


@pytest.mark.unit
def test_delete_empty_category(app, auth_client) -> None:
    created = auth_client.post("/api/categories", json={"name": "Empty"}).get_json()["data"]["category"]

    response = auth_client.delete(f"/api/categories/{created['id']}")

    assert response.status_code == 200
    with app.app_context():
        assert db.session.get(Category, created["id"]) is None


@pytest.mark.unit
def test_create_site_in_private_subtree_is_forced_private(auth_client, seeded) -> None:
    response = auth_client.post(
        "/api/sites",
        json={"name": "Hidden", "url": "https://hidden.example.com/path", "category_id": 2, "is_private": False},
    )

    assert response.status_code == 201
    site = response.get_json()["data"]["site"]
    assert site["is_private"] is True
    assert site["category_name"] == "Tools"
    assert site["logo"] == "https://favicon.im/hidden.example.com?larger=true"


@pytest.mark.unit
def test_create_site_requires_name_url_and_category(auth_client, seeded) -> None:
    response = auth_client.post("/api/sites", json={"name": "NoUrl", "category_id": 3})

    assert response.status_code == 400


@pytest.mark.unit
def test_create_site_rejects_non_json_body(auth_client, seeded) -> None:
    response = auth_client.post("/api/sites", data="name=x", content_type="application/x-www-form-urlencoded")

    assert response.status_code == 400
    assert response.get_json()["message"] == "请求必须是JSON格式"


@pytest.mark.unit
def test_update_and_delete_site(app, auth_client, seeded) -> None:
    updated = auth_client.put(
        "/api/sites/11",
        json={"name": "OpenSite2", "url": "https://open.example.com", "category_id": 3, "logo": "https://cdn/logo.png"},
    )
    assert updated.status_code == 200
    assert updated.get_json()["data"]["site"]["logo"] == "https://cdn/logo.png"

    deleted = auth_client.delete("/api/sites/11")
    assert deleted.status_code == 200
    assert auth_client.delete("/api/sites/11").status_code == 404
    with app.app_context():
        assert db.session.get(Site, 11) is None


@pytest.mark.unit
def test_save_settings_ignores_unknown_keys(app, auth_client) -> None:
    response = auth_client.post(
        "/api/settings",
        json={"home_site_name": "我的导航", "layout_hide_desc": True, "bogus": "x"},
    )

    assert response.status_code == 200
    data = response.get_json()["data"]
    assert sorted(data["saved"]) == ["home_site_name", "layout_hide_desc"]
    assert data["settings"]["home_site_name"] == "我的导航"
    assert data["settings"]["layout_hide_desc"] is True
    with app.app_context():
        assert db.session.get(Setting, "bogus") is None
        assert db.session.get(Setting, "layout_hide_desc").value == "true"


@pytest.mark.unit
def test_cache_clear_invalidates_both_classes(app, auth_client) -> None:
    with app.app_context():
        home_snapshot_cache.put(VisibilityClass.PUBLIC, "public")
        home_snapshot_cache.put(VisibilityClass.PRIVATE, "private")

    response = auth_client.post("/api/cache/clear")

    assert response.status_code == 200
    assert response.get_json()["message"] == "首页缓存已清除"
    with app.app_context():
        assert home_snapshot_cache.get(VisibilityClass.PUBLIC) is None
        assert home_snapshot_cache.get(VisibilityClass.PRIVATE) is None


@pytest.mark.unit
def test_export_excludes_effectively_private_content_by_default(auth_client, seeded) -> None:
    response = auth_client.get("/api/config/export")

    assert response.status_code == 200
    assert 'filename="config.json"' in response.headers["Content-Disposition"]
    exported = json.loads(response.get_data(as_text=True))
    assert [category["name"] for category in exported["category"]] == ["Open"]
    assert [site["name"] for site in exported["sites"]] == ["OpenSite"]


@pytest.mark.unit
def test_export_with_private_content(auth_client, seeded) -> None:
    response = auth_client.get("/api/config/export?include_private=true")

    exported = json.loads(response.get_data(as_text=True))
    assert {category["name"] for category in exported["category"]} == {"Dev", "Tools", "Open"}
    assert {site["name"] for site in exported["sites"]} == {"SecretTool", "OpenSite"}
