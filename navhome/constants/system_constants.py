"""导航主页 - 常量定义模块

统一管理错误分类、提示文案等硬编码值.
"""

from enum import Enum


class LogLevel(Enum):
    """日志级别枚举."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class ErrorCategory(Enum):
    """错误分类枚举."""

    VALIDATION = "validation"
    BUSINESS = "business"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    SECURITY = "security"
    DATABASE = "database"
    SYSTEM = "system"
    UNKNOWN = "unknown"


class ErrorSeverity(Enum):
    """错误严重程度枚举."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorMessages:
    """错误消息常量."""

    # 通用错误
    INTERNAL_ERROR = "服务器内部错误"
    VALIDATION_ERROR = "数据验证失败"
    PERMISSION_DENIED = "权限不足"
    RESOURCE_NOT_FOUND = "资源不存在"
    INVALID_REQUEST = "无效的请求"
    AUTHENTICATION_REQUIRED = "请先登录"
    JSON_REQUIRED = "请求必须是JSON格式"
    MISSING_REQUIRED_FIELDS = "缺少必需字段: {fields}"

    # 认证错误
    INVALID_CREDENTIALS = "用户名或密码错误"
    ACCOUNT_DISABLED = "账户已被禁用"
    RATE_LIMIT_EXCEEDED = "请求过于频繁,请稍后再试"
    LOGIN_LOCKED = "登录失败次数过多,请稍后再试"

    # 数据库错误
    DATABASE_QUERY_ERROR = "数据库查询错误"
    CONSTRAINT_VIOLATION = "数据约束错误"

    # 业务错误
    SITES_FETCH_FAILED = "Failed to fetch sites"
    CATEGORY_NOT_FOUND = "分类不存在"
    CATEGORY_NOT_EMPTY = "分类下仍有子分类或书签,无法删除"
    CATEGORY_PARENT_INVALID = "父级分类无效"
    SITE_NOT_FOUND = "书签不存在"
    PENDING_SITE_NOT_FOUND = "待审核书签不存在"
    SUBMISSION_DISABLED = "公共提交功能未开启"


class SuccessMessages:
    """成功消息常量."""

    OPERATION_SUCCESS = "操作成功"

    LOGIN_SUCCESS = "登录成功"
    LOGOUT_SUCCESS = "登出成功"

    CATEGORY_CREATED = "分类创建成功"
    CATEGORY_UPDATED = "分类更新成功"
    CATEGORY_DELETED = "分类删除成功"
    SITE_CREATED = "书签创建成功"
    SITE_UPDATED = "书签更新成功"
    SITE_DELETED = "书签删除成功"
    SETTINGS_SAVED = "设置保存成功"
    SUBMISSION_RECEIVED = "提交成功,等待管理员审核"
    PENDING_APPROVED = "审核通过"
    PENDING_REJECTED = "已拒绝该提交"
    HOME_CACHE_CLEARED = "首页缓存已清除"


__all__ = [
    "ErrorCategory",
    "ErrorMessages",
    "ErrorSeverity",
    "LogLevel",
    "SuccessMessages",
]
