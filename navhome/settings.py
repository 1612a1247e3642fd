"""导航主页 - 运行配置.

所有环境变量只在本模块解析,`create_app(settings=...)` 通过 `to_flask_config()` 写入 app.config.
配置来源为环境变量与项目根目录下可选的 `.env`;生产环境缺少 SECRET_KEY 或 DATABASE_URL 时拒绝启动,
开发与测试环境回落到随机密钥和本地 SQLite.
"""

from __future__ import annotations

import logging
import secrets
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parent.parent
DOTENV_PATH = PROJECT_ROOT / ".env"

DEFAULT_ENVIRONMENT = "development"
APP_VERSION = "1.0.0"

DEFAULT_SCHEMA_VERSION = "v2"

DEFAULT_CACHE_TYPE = "simple"
DEFAULT_CACHE_DEFAULT_TIMEOUT_SECONDS = 300
DEFAULT_CACHE_REDIS_URL = "redis://localhost:6379/0"
# 0 表示首页快照永不过期,仅依赖写操作失效
DEFAULT_HOME_CACHE_TTL_SECONDS = 0

DEFAULT_ICON_API = "https://favicon.im/"
DEFAULT_AI_REQUEST_DELAY_MS = 1500

DEFAULT_SUBMIT_RATE_LIMIT = 5
DEFAULT_SUBMIT_RATE_WINDOW_SECONDS = 60

# 同一 IP 连续登录失败达到上限后锁定,锁定期内成功登录也会被拒绝
DEFAULT_LOGIN_MAX_ATTEMPTS = 5
DEFAULT_LOGIN_LOCKOUT_SECONDS = 900

DEFAULT_BCRYPT_LOG_ROUNDS = 12
BCRYPT_LOG_ROUNDS_MIN = 4

DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_FILE = "userdata/logs/app.log"
DEFAULT_LOG_MAX_SIZE_BYTES = 10 * 1024 * 1024
DEFAULT_LOG_BACKUP_COUNT = 5

DEFAULT_SESSION_LIFETIME_SECONDS = 12 * 3600

_SUPPORTED_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

# 配置值到 Flask-Caching 后端类名的映射
_CACHE_BACKENDS = {"simple": "SimpleCache", "redis": "RedisCache"}


def _resolve_sqlite_fallback_url() -> str:
    db_path = _resolve_sqlite_fallback_path()
    return f"sqlite:///{db_path.absolute()}"


def _resolve_sqlite_fallback_path() -> Path:
    return PROJECT_ROOT / "userdata" / "navhome_dev.db"


class Settings(BaseSettings):
    """应用运行时设置集合."""

    model_config = SettingsConfigDict(
        env_ignore_empty=True,
        extra="ignore",
        frozen=True,
        str_strip_whitespace=True,
        enable_decoding=False,
    )

    environment: str = Field(default=DEFAULT_ENVIRONMENT, validation_alias="FLASK_ENV")
    debug: bool = Field(default=False, validation_alias="FLASK_DEBUG")

    app_name: str = Field(default="导航主页", validation_alias="APP_NAME")
    app_version: str = APP_VERSION

    secret_key: str = Field(default="", validation_alias="SECRET_KEY")

    database_url: str = Field(default="", validation_alias="DATABASE_URL")

    # 结构版本号,决定迁移标记键 schema_migrated_<version>
    schema_version: str = Field(default=DEFAULT_SCHEMA_VERSION, validation_alias="SCHEMA_VERSION")

    cache_type: str = Field(default=DEFAULT_CACHE_TYPE, validation_alias="CACHE_TYPE")
    cache_redis_url: str | None = Field(default=None, validation_alias="CACHE_REDIS_URL")
    cache_default_timeout_seconds: int = Field(
        default=DEFAULT_CACHE_DEFAULT_TIMEOUT_SECONDS,
        validation_alias="CACHE_DEFAULT_TIMEOUT",
    )
    home_cache_ttl_seconds: int = Field(default=DEFAULT_HOME_CACHE_TTL_SECONDS, validation_alias="HOME_CACHE_TTL")

    enable_public_submission: bool = Field(default=False, validation_alias="ENABLE_PUBLIC_SUBMISSION")
    submit_rate_limit: int = Field(default=DEFAULT_SUBMIT_RATE_LIMIT, validation_alias="SUBMIT_RATE_LIMIT")
    submit_rate_window_seconds: int = Field(
        default=DEFAULT_SUBMIT_RATE_WINDOW_SECONDS,
        validation_alias="SUBMIT_RATE_WINDOW",
    )

    site_name: str = Field(default="灰色轨迹", validation_alias="SITE_NAME")
    site_description: str = Field(default="一个优雅、快速、易于部署的书签(网址)收藏与分享平台", validation_alias="SITE_DESCRIPTION")
    footer_text: str = Field(default="", validation_alias="FOOTER_TEXT")
    icon_api: str = Field(default=DEFAULT_ICON_API, validation_alias="ICON_API")
    ai_request_delay_ms: int = Field(default=DEFAULT_AI_REQUEST_DELAY_MS, validation_alias="AI_REQUEST_DELAY")

    admin_username: str = Field(default="", validation_alias="ADMIN_USERNAME")
    admin_password: str = Field(default="", validation_alias="ADMIN_PASSWORD")
    login_max_attempts: int = Field(default=DEFAULT_LOGIN_MAX_ATTEMPTS, validation_alias="LOGIN_MAX_ATTEMPTS")
    login_lockout_seconds: int = Field(default=DEFAULT_LOGIN_LOCKOUT_SECONDS, validation_alias="LOGIN_LOCKOUT_SECONDS")
    bcrypt_log_rounds: int = Field(default=DEFAULT_BCRYPT_LOG_ROUNDS, validation_alias="BCRYPT_LOG_ROUNDS")

    log_level: str = Field(default=DEFAULT_LOG_LEVEL, validation_alias="LOG_LEVEL")
    log_file: str = Field(default=DEFAULT_LOG_FILE, validation_alias="LOG_FILE")
    log_max_size_bytes: int = Field(default=DEFAULT_LOG_MAX_SIZE_BYTES, validation_alias="LOG_MAX_SIZE")
    log_backup_count: int = Field(default=DEFAULT_LOG_BACKUP_COUNT, validation_alias="LOG_BACKUP_COUNT")

    session_lifetime_seconds: int = Field(
        default=DEFAULT_SESSION_LIFETIME_SECONDS,
        validation_alias="PERMANENT_SESSION_LIFETIME",
    )

    @field_validator("cache_type")
    @classmethod
    def _normalize_cache_type(cls, value: str) -> str:
        return value.lower()

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        return value.upper()

    @field_validator("cache_redis_url", mode="before")
    @classmethod
    def _strip_blank_to_none(cls, value: object) -> object:
        if value is None:
            return None
        if isinstance(value, str):
            return value.strip() or None
        return value

    @property
    def is_production(self) -> bool:
        """当前是否为生产环境."""
        return self.environment.strip().lower() == "production"

    @property
    def is_testing(self) -> bool:
        return self.environment.strip().lower() == "testing"

    @property
    def schema_marker_key(self) -> str:
        """迁移标记在 KV 中的键名."""
        return f"schema_migrated_{self.schema_version}"

    @property
    def sqlalchemy_engine_options(self) -> dict[str, object]:
        """生成 SQLAlchemy Engine 配置选项."""
        if self.database_url.startswith("sqlite"):
            return {"pool_pre_ping": True, "connect_args": {"check_same_thread": False}}
        return {"pool_pre_ping": True, "pool_recycle": 300, "echo": bool(self.debug)}

    def to_flask_config(self) -> dict[str, object]:
        """转换为 Flask app.config 可写入的配置字典."""
        payload: dict[str, object] = {
            "ENV": self.environment,
            "DEBUG": self.debug,
            "TESTING": self.is_testing,
            "APP_NAME": self.app_name,
            "APP_VERSION": self.app_version,
            "SECRET_KEY": self.secret_key,
            "SQLALCHEMY_DATABASE_URI": self.database_url,
            "SQLALCHEMY_TRACK_MODIFICATIONS": False,
            "SQLALCHEMY_ENGINE_OPTIONS": dict(self.sqlalchemy_engine_options),
            "SCHEMA_VERSION": self.schema_version,
            "SCHEMA_MARKER_KEY": self.schema_marker_key,
            "CACHE_TYPE": _CACHE_BACKENDS[self.cache_type],
            "CACHE_DEFAULT_TIMEOUT": self.cache_default_timeout_seconds,
            "HOME_CACHE_TTL": self.home_cache_ttl_seconds,
            "ENABLE_PUBLIC_SUBMISSION": self.enable_public_submission,
            "SUBMIT_RATE_LIMIT": self.submit_rate_limit,
            "SUBMIT_RATE_WINDOW": self.submit_rate_window_seconds,
            "SITE_NAME": self.site_name,
            "SITE_DESCRIPTION": self.site_description,
            "FOOTER_TEXT": self.footer_text,
            "ICON_API": self.icon_api,
            "AI_REQUEST_DELAY": self.ai_request_delay_ms,
            "ADMIN_USERNAME": self.admin_username,
            "ADMIN_PASSWORD": self.admin_password,
            "LOGIN_MAX_ATTEMPTS": self.login_max_attempts,
            "LOGIN_LOCKOUT_SECONDS": self.login_lockout_seconds,
            "BCRYPT_LOG_ROUNDS": self.bcrypt_log_rounds,
            "LOG_LEVEL": self.log_level,
            "LOG_FILE": self.log_file,
            "LOG_MAX_SIZE": self.log_max_size_bytes,
            "LOG_BACKUP_COUNT": self.log_backup_count,
            "PERMANENT_SESSION_LIFETIME": self.session_lifetime_seconds,
        }
        if self.cache_type == "redis" and self.cache_redis_url:
            payload["CACHE_REDIS_URL"] = self.cache_redis_url
        return payload

    @classmethod
    def load(cls) -> Settings:
        """从环境变量加载 Settings 并执行必要校验."""
        load_dotenv(dotenv_path=DOTENV_PATH if DOTENV_PATH.exists() else None, override=False)
        return cls()

    @model_validator(mode="after")
    def _apply_defaults_and_validate(self) -> Settings:
        environment_normalized = self.environment.strip().lower()

        debug = self._resolve_debug(environment_normalized)
        self._ensure_secret_key(debug)
        self._ensure_database_url(environment_normalized)
        self._normalize_cache_redis_url(environment_normalized)

        self._validate()
        return self

    def _resolve_debug(self, environment_normalized: str) -> bool:
        if "debug" in self.model_fields_set:
            return bool(self.debug)
        debug = environment_normalized != "production"
        object.__setattr__(self, "debug", debug)
        return debug

    def _ensure_secret_key(self, debug: bool) -> None:
        if self.secret_key:
            return
        if not debug:
            raise ValueError("SECRET_KEY environment variable must be set in production")
        object.__setattr__(self, "secret_key", secrets.token_urlsafe(32))
        logger.warning("⚠️  开发环境使用随机生成的SECRET_KEY,生产环境请设置环境变量")

    def _ensure_database_url(self, environment_normalized: str) -> None:
        if self.database_url:
            return
        if environment_normalized == "production":
            raise ValueError("DATABASE_URL environment variable must be set in production")

        object.__setattr__(self, "database_url", _resolve_sqlite_fallback_url())
        if environment_normalized not in {"testing", "test"}:
            logger.warning(
                "⚠️  未设置 DATABASE_URL, 非 production 环境将回退 SQLite (sqlite_db_file=%s)",
                _resolve_sqlite_fallback_path().name,
            )

    def _normalize_cache_redis_url(self, environment_normalized: str) -> None:
        if self.cache_type != "redis":
            if self.cache_redis_url is not None:
                object.__setattr__(self, "cache_redis_url", None)
            return

        if self.cache_redis_url:
            return
        if environment_normalized == "production":
            raise ValueError("CACHE_REDIS_URL must be set when CACHE_TYPE=redis in production")
        object.__setattr__(self, "cache_redis_url", DEFAULT_CACHE_REDIS_URL)

    def _validate(self) -> None:
        """执行跨字段校验,统一抛出可读的 ValueError."""
        errors: list[str] = []
        checks: list[tuple[str, bool]] = [
            ("SCHEMA_VERSION 不能为空", not self.schema_version),
            ("CACHE_TYPE 仅支持 simple/redis", self.cache_type not in {"simple", "redis"}),
            ("CACHE_TYPE=redis 时必须提供 CACHE_REDIS_URL", self.cache_type == "redis" and not self.cache_redis_url),
            ("CACHE_DEFAULT_TIMEOUT 不能为负数", self.cache_default_timeout_seconds < 0),
            ("HOME_CACHE_TTL 不能为负数(0 表示永不过期)", self.home_cache_ttl_seconds < 0),
            ("SUBMIT_RATE_LIMIT 必须为正整数", self.submit_rate_limit <= 0),
            ("SUBMIT_RATE_WINDOW 必须为正整数(秒)", self.submit_rate_window_seconds <= 0),
            ("AI_REQUEST_DELAY 不能为负数(毫秒)", self.ai_request_delay_ms < 0),
            ("LOGIN_MAX_ATTEMPTS 必须为正整数", self.login_max_attempts <= 0),
            ("LOGIN_LOCKOUT_SECONDS 必须为正整数(秒)", self.login_lockout_seconds <= 0),
            (f"BCRYPT_LOG_ROUNDS 不应小于 {BCRYPT_LOG_ROUNDS_MIN}", self.bcrypt_log_rounds < BCRYPT_LOG_ROUNDS_MIN),
            ("PERMANENT_SESSION_LIFETIME 必须为正整数(秒)", self.session_lifetime_seconds <= 0),
            ("LOG_LEVEL 取值非法", self.log_level not in _SUPPORTED_LOG_LEVELS),
            (
                "ADMIN_USERNAME 与 ADMIN_PASSWORD 必须同时设置",
                bool(self.admin_username) != bool(self.admin_password),
            ),
        ]
        for message, condition in checks:
            if condition:
                errors.append(message)

        if errors:
            joined = "; ".join(errors)
            raise ValueError(f"配置校验失败: {joined}")
