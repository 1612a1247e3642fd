"""首页快照缓存契约测试."""

import pytest
from sqlalchemy.exc import OperationalError

from navhome.repositories.categories_repository import CategoriesRepository
from navhome.repositories.sites_repository import SitesRepository
from navhome.services.cache.home_cache_service import VisibilityClass, home_snapshot_cache


def _get_home(client, path="/"):
    response = client.get(path)
    body = response.get_data(as_text=True)
    # 快照写入注册在 call_on_close 中
    response.close()
    return response, body


@pytest.mark.unit
def test_home_miss_then_hit_for_anonymous(client, seeded) -> None:
    first, first_body = _get_home(client)
    second, second_body = _get_home(client)

    assert first.status_code == 200
    assert first.headers["X-Cache"] == "MISS"
    assert second.headers["X-Cache"] == "HIT"
    assert second_body == first_body


@pytest.mark.unit
def test_anonymous_home_hides_inherited_private_content(client, seeded) -> None:
    _, body = _get_home(client)

    assert "OpenSite" in body
    assert "SecretTool" not in body
    assert "Tools" not in body
    assert "Dev" not in body


@pytest.mark.unit
def test_authenticated_home_shows_private_content(auth_client, seeded) -> None:
    _, body = _get_home(auth_client)

    assert "OpenSite" in body
    assert "SecretTool" in body
    assert "Tools" in body


@pytest.mark.unit
def test_public_and_private_snapshots_do_not_leak(app, client, auth_client, seeded) -> None:
    _get_home(client)
    admin_response, admin_body = _get_home(auth_client)

    assert admin_response.headers["X-Cache"] == "MISS"
    assert "SecretTool" in admin_body

    with app.app_context():
        assert "SecretTool" not in (home_snapshot_cache.get(VisibilityClass.PUBLIC) or "")
        assert "SecretTool" in (home_snapshot_cache.get(VisibilityClass.PRIVATE) or "")


@pytest.mark.unit
def test_query_string_bypasses_cache(app, client, seeded) -> None:
    response, body = _get_home(client, "/?catalog=Open")

    assert response.headers["X-Cache"] == "BYPASS"
    assert "OpenSite" in body
    with app.app_context():
        assert home_snapshot_cache.get(VisibilityClass.PUBLIC) is None


@pytest.mark.unit
def test_query_string_never_serves_cached_snapshot(app, client, seeded) -> None:
    with app.app_context():
        home_snapshot_cache.put(VisibilityClass.PUBLIC, "<html>cached</html>")

    response, body = _get_home(client, "/?catalog=all")

    assert response.headers["X-Cache"] == "BYPASS"
    assert "cached" not in body


@pytest.mark.unit
def test_stale_cookie_invalidates_both_classes_and_is_cleared(app, auth_client, seeded) -> None:
    with app.app_context():
        home_snapshot_cache.put(VisibilityClass.PUBLIC, "<html>stale public</html>")
        home_snapshot_cache.put(VisibilityClass.PRIVATE, "<html>stale private</html>")
    auth_client.set_cookie("iori_cache_stale", "1")

    response = auth_client.get("/")
    body = response.get_data(as_text=True)

    assert response.headers["X-Cache"] == "MISS"
    assert "stale private" not in body
    set_cookie = " ".join(response.headers.getlist("Set-Cookie"))
    assert "iori_cache_stale=;" in set_cookie
    assert "Max-Age=0" in set_cookie
    with app.app_context():
        assert home_snapshot_cache.get(VisibilityClass.PRIVATE) is None

    response.close()
    with app.app_context():
        assert "SecretTool" in (home_snapshot_cache.get(VisibilityClass.PRIVATE) or "")
        assert home_snapshot_cache.get(VisibilityClass.PUBLIC) is None


@pytest.mark.unit
def test_stale_cookie_from_anonymous_visitor_is_ignored(app, client, seeded) -> None:
    with app.app_context():
        home_snapshot_cache.put(VisibilityClass.PUBLIC, "<html>public snapshot</html>")
        home_snapshot_cache.put(VisibilityClass.PRIVATE, "<html>private snapshot</html>")
    client.set_cookie("iori_cache_stale", "1")

    response, body = _get_home(client)

    assert response.headers["X-Cache"] == "HIT"
    assert body == "<html>public snapshot</html>"
    with app.app_context():
        assert home_snapshot_cache.get(VisibilityClass.PRIVATE) == "<html>private snapshot</html>"


@pytest.mark.unit
def test_admin_mutation_invalidates_both_snapshots(app, client, auth_client, seeded) -> None:
    _get_home(client)
    _get_home(auth_client)

    response = auth_client.post(
        "/api/sites",
        json={"name": "NewSite", "url": "https://new.example.com", "category_id": seeded["open_category_id"]},
    )

    assert response.status_code == 201
    with app.app_context():
        assert home_snapshot_cache.get(VisibilityClass.PUBLIC) is None
        assert home_snapshot_cache.get(VisibilityClass.PRIVATE) is None

    follow_up, body = _get_home(client)
    assert follow_up.headers["X-Cache"] == "MISS"
    assert "NewSite" in body


@pytest.mark.unit
def test_site_read_failure_returns_plain_500(client, seeded, monkeypatch) -> None:
    def _raise(*_args, **_kwargs):
        raise OperationalError("SELECT sites", {}, Exception("disk I/O error"))

    monkeypatch.setattr(SitesRepository, "list_all", staticmethod(_raise))

    response = client.get("/")

    assert response.status_code == 500
    assert response.mimetype == "text/plain"
    assert response.get_data(as_text=True) == "Failed to fetch sites"


@pytest.mark.unit
def test_category_read_failure_degrades_to_flat_page(client, seeded, monkeypatch) -> None:
    def _raise(*_args, **_kwargs):
        raise OperationalError("SELECT category", {}, Exception("no such table"))

    monkeypatch.setattr(CategoriesRepository, "list_all", staticmethod(_raise))

    response, body = _get_home(client)

    assert response.status_code == 200
    assert "OpenSite" in body


@pytest.mark.unit
def test_explicit_category_remembered_when_enabled(app, client, auth_client, seeded) -> None:
    saved = auth_client.post("/api/settings", json={"home_remember_last_category": True})
    assert saved.status_code == 200

    response, _ = _get_home(client, "/?catalog=Open")

    set_cookie = " ".join(response.headers.getlist("Set-Cookie"))
    assert f"iori_last_category={seeded['open_category_id']}" in set_cookie


@pytest.mark.unit
def test_unknown_category_parameter_shows_all_visible_sites(client, seeded) -> None:
    response, body = _get_home(client, "/?catalog=Missing")

    assert response.status_code == 200
    assert "OpenSite" in body
    assert "全部收藏" in body


@pytest.mark.unit
def test_remembered_category_page_is_not_stored_as_shared_snapshot(app, client, auth_client, seeded) -> None:
    saved = auth_client.post("/api/settings", json={"home_remember_last_category": True})
    assert saved.status_code == 200
    client.set_cookie("iori_last_category", str(seeded["open_category_id"]))

    remembered, remembered_body = _get_home(client)

    assert remembered.headers["X-Cache"] == "BYPASS"
    assert "全部收藏" not in remembered_body
    with app.app_context():
        assert home_snapshot_cache.get(VisibilityClass.PUBLIC) is None

    fresh, fresh_body = _get_home(app.test_client())

    assert fresh.headers["X-Cache"] == "MISS"
    assert "全部收藏" in fresh_body
    assert fresh_body != remembered_body


@pytest.mark.unit
def test_remember_cookie_ignored_when_setting_disabled(client, seeded) -> None:
    client.set_cookie("iori_last_category", str(seeded["open_category_id"]))

    response, body = _get_home(client)

    assert response.headers["X-Cache"] == "MISS"
    assert "全部收藏" in body
