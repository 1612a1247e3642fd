"""主页设置保存 Service.

只接受设置表中声明的键,未知键直接忽略;值统一序列化为文本存储.
"""

from __future__ import annotations

from collections.abc import Mapping

from sqlalchemy.exc import SQLAlchemyError

from navhome import db
from navhome.errors import ValidationError
from navhome.repositories.settings_repository import SettingsRepository
from navhome.services.settings.settings_resolver import resolve_settings, serialize_setting, settings_keys
from navhome.utils.route_safety import log_with_context


class SettingsWriteService:
    """主页设置读写服务."""

    def __init__(self, repository: SettingsRepository | None = None) -> None:
        self._repository = repository or SettingsRepository()

    def current(self) -> dict[str, bool | str]:
        return resolve_settings(self._repository.list_by_keys(settings_keys()))

    def save(self, payload: Mapping[str, object], *, operator_id: int | None = None) -> list[str]:
        """写入设置.

        Args:
            payload: 键值对,未在设置表中声明的键会被忽略.
            operator_id: 操作人 ID,仅用于日志.

        Returns:
            list[str]: 实际写入的键.

        """
        saved: list[str] = []
        ignored: list[str] = []
        try:
            for key, value in payload.items():
                serialized = serialize_setting(key, value)
                if serialized is None:
                    ignored.append(key)
                    continue
                self._repository.upsert(key, serialized)
                saved.append(key)
            db.session.flush()
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise ValidationError("保存失败,请稍后再试", extra={"exception": str(exc)}) from exc

        log_with_context(
            "info",
            "保存主页设置",
            module="settings",
            action="save_settings",
            context={"operator_id": operator_id},
            extra={"saved_keys": saved, "ignored_keys": ignored},
        )
        return saved
