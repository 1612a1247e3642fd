"""统一时间处理工具模块.

基于 zoneinfo 模块,提供一致的时间处理功能.
"""

from datetime import UTC, date, datetime
from zoneinfo import ZoneInfo

from navhome.utils.structlog_config import get_system_logger

CHINA_TZ = ZoneInfo("Asia/Shanghai")
UTC_TZ = ZoneInfo("UTC")


class TimeFormats:
    """时间格式常量."""

    DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"
    DATE_FORMAT = "%Y-%m-%d"


class TimeUtils:
    """统一时间处理工具类."""

    @staticmethod
    def now() -> datetime:
        """获取当前 UTC 时间."""
        return datetime.now(UTC)

    @staticmethod
    def now_china() -> datetime:
        """获取当前中国时间."""
        return datetime.now(CHINA_TZ)

    @staticmethod
    def to_china(dt: str | date | datetime | None) -> datetime | None:
        """将时间转换为中国时区.

        Args:
            dt: 待转换的时间,可以是字符串、date 或 datetime 对象.

        Returns:
            转换后的中国时区时间,转换失败时返回 None.

        """
        if not dt:
            return None

        try:
            if isinstance(dt, str):
                if dt.endswith("Z"):
                    dt = dt[:-1] + "+00:00"
                dt = datetime.fromisoformat(dt)
            elif isinstance(dt, date) and not isinstance(dt, datetime):
                dt = datetime.combine(dt, datetime.min.time())

            if dt.tzinfo is None:
                # 无时区信息时按 UTC 处理
                dt = dt.replace(tzinfo=UTC_TZ)

            return dt.astimezone(CHINA_TZ)
        except (ValueError, TypeError) as e:
            get_system_logger().warning("时间转换错误", module="time_utils", error=str(e))
            return None

    @staticmethod
    def format_china_time(
        dt: str | date | datetime | None,
        format_str: str = TimeFormats.DATETIME_FORMAT,
    ) -> str:
        """格式化中国时间显示,失败时返回 '-'."""
        china_dt = TimeUtils.to_china(dt)
        if not china_dt:
            return "-"
        return china_dt.strftime(format_str)

    @staticmethod
    def to_json_serializable(dt: str | date | datetime | None) -> str | None:
        """转换时间对象为 JSON 可序列化的 ISO 字符串."""
        if not dt:
            return None
        if isinstance(dt, str):
            return dt
        return dt.isoformat()


time_utils = TimeUtils()
