import pytest

from navhome.services.settings.settings_resolver import (
    SETTINGS_SCHEMA,
    resolve_settings,
    serialize_setting,
    settings_keys,
)


@pytest.mark.unit
def test_resolve_settings_returns_defaults_for_empty_rows() -> None:
    resolved = resolve_settings([])

    assert set(resolved) == set(SETTINGS_SCHEMA)
    for key, spec in SETTINGS_SCHEMA.items():
        assert resolved[key] == spec.default


@pytest.mark.unit
def test_resolve_settings_accepts_none() -> None:
    assert resolve_settings(None) == resolve_settings([])


@pytest.mark.unit
def test_resolve_settings_drops_unknown_keys() -> None:
    resolved = resolve_settings([{"key": "not_a_setting", "value": "x"}])

    assert "not_a_setting" not in resolved
    assert set(resolved) == set(settings_keys())


@pytest.mark.unit
def test_bool_setting_only_parses_literal_true() -> None:
    resolved = resolve_settings(
        [
            {"key": "layout_hide_desc", "value": "true"},
            {"key": "layout_hide_links", "value": "1"},
            {"key": "layout_hide_title", "value": "TRUE"},
        ],
    )

    assert resolved["layout_hide_desc"] is True
    assert resolved["layout_hide_links"] is False
    assert resolved["layout_hide_title"] is False


@pytest.mark.unit
def test_legacy_bool_setting_accepts_one() -> None:
    resolved = resolve_settings([("home_hide_github", "1"), ("home_hide_admin", "true")])

    assert resolved["home_hide_github"] is True
    assert resolved["home_hide_admin"] is True


@pytest.mark.unit
def test_string_setting_passes_through_and_none_keeps_default() -> None:
    class Row:
        def __init__(self, key, value):
            self.key = key
            self.value = value

    resolved = resolve_settings([Row("home_site_name", "我的导航"), Row("layout_grid_cols", None)])

    assert resolved["home_site_name"] == "我的导航"
    assert resolved["layout_grid_cols"] == "4"


@pytest.mark.unit
def test_resolve_settings_does_not_mutate_defaults_between_calls() -> None:
    first = resolve_settings([{"key": "layout_card_style", "value": "style2"}])
    second = resolve_settings([])

    assert first["layout_card_style"] == "style2"
    assert second["layout_card_style"] == "style1"


@pytest.mark.unit
@pytest.mark.parametrize(
    ("key", "value", "expected"),
    [
        ("layout_hide_desc", True, "true"),
        ("layout_hide_desc", "false", "false"),
        ("home_hide_github", "1", "true"),
        ("home_site_name", "导航", "导航"),
        ("home_site_name", None, ""),
        ("unknown_key", "x", None),
    ],
)
def test_serialize_setting(key, value, expected) -> None:
    assert serialize_setting(key, value) == expected
