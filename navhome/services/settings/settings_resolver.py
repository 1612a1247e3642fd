"""主页设置解析.

将固定的设置表(键 -> 类型 + 默认值)与持久化的键值行合并为完整的设置字典.
纯函数,无状态、无副作用.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum


class SettingType(Enum):
    """设置值类型."""

    BOOL = "bool"
    # 兼容历史数据,"1" 同样视为 true
    BOOL_OR_ONE = "bool_or_one"
    STRING = "string"


@dataclass(frozen=True, slots=True)
class SettingSpec:
    type: SettingType
    default: bool | str


def _flag() -> SettingSpec:
    return SettingSpec(SettingType.BOOL, False)


def _text(default: str = "") -> SettingSpec:
    return SettingSpec(SettingType.STRING, default)


SETTINGS_SCHEMA: dict[str, SettingSpec] = {
    "layout_hide_desc": _flag(),
    "layout_hide_links": _flag(),
    "layout_hide_category": _flag(),
    "layout_hide_title": _flag(),
    "home_title_size": _text(),
    "home_title_color": _text(),
    "layout_hide_subtitle": _flag(),
    "home_subtitle_size": _text(),
    "home_subtitle_color": _text(),
    "home_hide_stats": _flag(),
    "home_stats_size": _text(),
    "home_stats_color": _text(),
    "home_hide_hitokoto": _flag(),
    "home_hitokoto_size": _text(),
    "home_hitokoto_color": _text(),
    "home_hide_github": SettingSpec(SettingType.BOOL_OR_ONE, False),
    "home_hide_admin": SettingSpec(SettingType.BOOL_OR_ONE, False),
    "home_custom_font_url": _text(),
    "home_title_font": _text(),
    "home_subtitle_font": _text(),
    "home_stats_font": _text(),
    "home_hitokoto_font": _text(),
    "home_site_name": _text(),
    "home_site_description": _text(),
    "home_search_engine_enabled": _flag(),
    "home_default_category": _text(),
    "home_remember_last_category": _flag(),
    "layout_grid_cols": _text("4"),
    "layout_custom_wallpaper": _text(),
    "layout_menu_layout": _text("horizontal"),
    "bing_country": _text(),
    "layout_enable_frosted_glass": _flag(),
    "layout_frosted_glass_intensity": _text("15"),
    "layout_enable_bg_blur": _flag(),
    "layout_bg_blur_intensity": _text("0"),
    "layout_card_style": _text("style1"),
    "layout_card_border_radius": _text("12"),
    "wallpaper_source": _text("bing"),
    "wallpaper_cid_360": _text("36"),
    "card_title_font": _text(),
    "card_title_size": _text(),
    "card_title_color": _text(),
    "card_desc_font": _text(),
    "card_desc_size": _text(),
    "card_desc_color": _text(),
}


def settings_keys() -> list[str]:
    """返回设置表中的全部键,用于 `WHERE key IN (...)` 查询."""
    return list(SETTINGS_SCHEMA)


def default_settings() -> dict[str, bool | str]:
    """返回全部默认值."""
    return {key: spec.default for key, spec in SETTINGS_SCHEMA.items()}


def _row_pair(row: object) -> tuple[object, object]:
    if isinstance(row, Mapping):
        return row.get("key"), row.get("value")
    if isinstance(row, tuple | list) and len(row) == 2:
        return row[0], row[1]
    return getattr(row, "key", None), getattr(row, "value", None)


def coerce_setting(spec: SettingSpec, raw: object) -> bool | str:
    """按声明类型转换持久化的原始值."""
    if spec.type is SettingType.BOOL:
        return raw == "true"
    if spec.type is SettingType.BOOL_OR_ONE:
        return raw in ("true", "1")
    if raw is None:
        return spec.default
    return str(raw)


def resolve_settings(rows: Iterable[object] | None) -> dict[str, bool | str]:
    """合并默认值与持久化行.

    Args:
        rows: 持久化的设置行,元素可为 {"key", "value"} 字典、(key, value) 二元组
            或带 key/value 属性的对象.

    Returns:
        dict[str, bool | str]: 包含设置表全部键且仅包含这些键的设置字典.

    """
    settings = default_settings()
    for row in rows or ():
        key, raw = _row_pair(row)
        spec = SETTINGS_SCHEMA.get(key) if isinstance(key, str) else None
        if spec is None:
            continue
        settings[key] = coerce_setting(spec, raw)
    return settings


def serialize_setting(key: str, value: object) -> str | None:
    """将待保存的值转换为存储文本,未知键返回 None.

    布尔类型统一写为 "true"/"false",其余类型按字符串保存.
    """
    spec = SETTINGS_SCHEMA.get(key)
    if spec is None:
        return None
    if spec.type is SettingType.STRING:
        return "" if value is None else str(value)
    if isinstance(value, str):
        return "true" if value.strip().lower() in ("true", "1") else "false"
    return "true" if value else "false"
