"""请求体数据类型转换工具.

将 JSON / 表单中的原始值映射为具体的 str/bool/int 类型,
便于服务层书写类型安全的校验逻辑.
"""

from __future__ import annotations

from collections.abc import Sequence

_STRING_LIKE_TYPES = (str, bytes, bytearray)


def _unwrap_sequence(value: object) -> object:
    if isinstance(value, Sequence) and not isinstance(value, _STRING_LIKE_TYPES):
        if not value:
            return None
        return value[-1]
    return value


def as_str(value: object, *, default: str = "") -> str:
    base = _unwrap_sequence(value)
    if base is None:
        return default
    if isinstance(base, str):
        return base
    if isinstance(base, (bytes, bytearray)):
        return base.decode()
    return str(base)


def as_optional_str(value: object) -> str | None:
    cleaned = as_str(value, default="").strip()
    return cleaned or None


def as_int(value: object, *, default: int | None = None) -> int | None:
    base = _unwrap_sequence(value)
    if base is None:
        return default
    if isinstance(base, bool):
        return int(base)
    if isinstance(base, int):
        return base
    if isinstance(base, float):
        return int(base) if base == base and base not in (float("inf"), float("-inf")) else default
    if isinstance(base, str):
        stripped = base.strip()
        if not stripped:
            return default
        try:
            return int(stripped, 10)
        except ValueError:
            return default
    return default


def as_bool(value: object, *, default: bool = False) -> bool:
    base = _unwrap_sequence(value)
    if base is None:
        return default
    if isinstance(base, bool):
        return base
    if isinstance(base, (int, float)):
        return bool(base)
    if isinstance(base, str):
        normalized = base.strip().lower()
        if normalized in {"true", "1", "yes", "on"}:
            return True
        if normalized in {"false", "0", "no", "off"}:
            return False
        return default
    return default
