"""主页设置 Repository."""

from __future__ import annotations

from collections.abc import Iterable

from navhome import db
from navhome.models.setting import Setting


class SettingsRepository:
    """设置键值读写."""

    @staticmethod
    def list_by_keys(keys: Iterable[str]) -> list[Setting]:
        key_list = list(keys)
        if not key_list:
            return []
        return Setting.query.filter(Setting.key.in_(key_list)).all()

    @staticmethod
    def upsert(key: str, value: str) -> Setting:
        setting = db.session.get(Setting, key)
        if setting is None:
            setting = Setting(key=key, value=value)
            db.session.add(setting)
        else:
            setting.value = value
        return setting
