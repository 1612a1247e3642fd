"""导航主页 - Flask 应用初始化.

基于 Flask 的书签导航主页,提供公开/登录两种可见性的首页渲染与管理接口.
"""

import logging
from datetime import datetime
from functools import lru_cache
from importlib import import_module
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING

from flask import Blueprint, Flask, jsonify, request
from flask.typing import ResponseReturnValue
from flask_bcrypt import Bcrypt
from flask_caching import Cache
from flask_login import LoginManager
from flask_sqlalchemy import SQLAlchemy

from navhome.constants import CookieNames
from navhome.settings import Settings
from navhome.utils.response_utils import unified_error_response
from navhome.utils.structlog_config import (
    ErrorContext,
    configure_structlog,
    get_system_logger,
)
from navhome.utils.time_utils import time_utils

if TYPE_CHECKING:
    from navhome.models.user import User

# 初始化扩展
db = SQLAlchemy()
cache = Cache()
bcrypt = Bcrypt()
login_manager = LoginManager()

# 记录应用启动时间
app_start_time = time_utils.now_china()


@lru_cache(maxsize=1)
def get_user_model() -> type["User"]:
    """延迟加载 User 模型,避免循环导入."""
    return import_module("navhome.models.user").User


def create_app(*, settings: Settings | None = None) -> Flask:
    """创建Flask应用实例.

    Args:
        settings: 可选的配置对象,用于测试或多环境启动.

    Returns:
        Flask: Flask应用实例

    """
    resolved_settings = settings or Settings.load()
    app = Flask(__name__)

    # 配置应用
    configure_app(app, resolved_settings)

    # 配置会话安全
    configure_security(app, resolved_settings)

    # 初始化扩展
    initialize_extensions(app, resolved_settings)

    # 请求前确保数据库结构就绪
    configure_schema_guard(app)

    # 注册蓝图
    configure_blueprints(app)

    # 配置日志
    configure_logging(app)

    # 配置统一日志系统
    configure_structlog(app)

    # 设置全局日志级别
    log_level_name = str(app.config.get("LOG_LEVEL", "INFO"))
    logging.getLogger().setLevel(getattr(logging, log_level_name, logging.INFO))

    # 注册全局错误处理器
    @app.errorhandler(Exception)
    def handle_global_exception(error: Exception) -> ResponseReturnValue:
        """全局错误处理."""
        payload, status_code = unified_error_response(error, context=ErrorContext(error, request))
        return jsonify(payload), status_code

    # 配置模板过滤器
    configure_template_filters(app)

    return app


def configure_app(app: Flask, settings: Settings) -> None:
    """写入 Settings 提供的配置.

    Args:
        app: Flask 应用实例.
        settings: 统一配置对象,包含环境变量解析、默认值与校验结果.

    """
    app.config.from_mapping(settings.to_flask_config())
    app.config.setdefault("APPLICATION_ROOT", "/")


def configure_security(app: Flask, settings: Settings) -> None:
    """配置会话安全参数与 Cookie 选项."""
    app.config["PERMANENT_SESSION_LIFETIME"] = settings.session_lifetime_seconds
    app.config["SESSION_COOKIE_SECURE"] = settings.is_production
    app.config["SESSION_COOKIE_HTTPONLY"] = True
    app.config["SESSION_COOKIE_SAMESITE"] = "Lax"
    app.config["SESSION_COOKIE_NAME"] = CookieNames.SESSION


def initialize_extensions(app: Flask, settings: Settings) -> None:
    """初始化数据库、缓存、登录等 Flask 扩展.

    Args:
        app: Flask 应用实例.
        settings: 统一配置对象,用于扩展初始化参数注入.

    """
    from navhome.services.cache.home_cache_service import init_home_snapshot_cache
    from navhome.services.schema.migration_guard import init_schema_guard

    # 初始化数据库
    db.init_app(app)

    # 初始化缓存与首页快照缓存
    cache.init_app(app)
    init_home_snapshot_cache(cache, ttl=settings.home_cache_ttl_seconds)

    # 初始化结构迁移守卫,迁移标记与快照共用同一 KV
    init_schema_guard(db, cache, marker_key=settings.schema_marker_key)

    # 初始化密码加密
    bcrypt.init_app(app)

    # 初始化登录管理
    login_manager.init_app(app)
    login_manager.login_view = "auth.login"
    login_manager.login_message = "请先登录"
    login_manager.login_message_category = "info"

    # 会话安全配置
    login_manager.session_protection = "basic"
    login_manager.remember_cookie_duration = settings.session_lifetime_seconds
    login_manager.remember_cookie_secure = settings.is_production
    login_manager.remember_cookie_httponly = True

    # 用户加载器
    @login_manager.user_loader
    def load_user(user_id: str) -> "User | None":
        user_model = get_user_model()
        return db.session.get(user_model, int(user_id))


def configure_schema_guard(app: Flask) -> None:
    """注册请求前的结构迁移钩子.

    迁移完成后钩子只读取进程内标记,不产生 I/O;静态资源请求跳过.
    """
    from navhome.services.schema.migration_guard import get_schema_guard

    @app.before_request
    def ensure_schema() -> None:
        if request.endpoint == "static":
            return
        guard = get_schema_guard()
        if guard is not None:
            guard.ensure_schema()


def configure_blueprints(app: Flask) -> None:
    """注册所有蓝图以暴露路由."""
    blueprint_specs: list[tuple[str, str, str | None]] = [
        ("navhome.routes.home", "home_bp", None),
        ("navhome.routes.auth", "auth_bp", "/admin"),
        ("navhome.routes.public", "public_bp", "/api"),
        ("navhome.routes.categories", "categories_bp", "/api/categories"),
        ("navhome.routes.sites", "sites_bp", "/api/sites"),
        ("navhome.routes.settings", "settings_bp", "/api/settings"),
        ("navhome.routes.pending", "pending_bp", "/api/pending"),
        ("navhome.routes.cache", "cache_bp", "/api/cache"),
    ]

    blueprints: list[tuple[Blueprint, str | None]] = []
    for module_path, attr_name, prefix in blueprint_specs:
        module = import_module(module_path)
        blueprint = getattr(module, attr_name)
        blueprints.append((blueprint, prefix))

    for blueprint, prefix in blueprints:
        if prefix:
            app.register_blueprint(blueprint, url_prefix=prefix)
        else:
            app.register_blueprint(blueprint)


def configure_logging(app: Flask) -> None:
    """配置日志系统与文件处理器."""
    if not app.debug and not app.testing:
        # 创建日志目录
        log_path = Path(app.config["LOG_FILE"])
        log_dir = log_path.parent
        log_dir.mkdir(parents=True, exist_ok=True)

        # 配置文件日志处理器
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=app.config["LOG_MAX_SIZE"],
            backupCount=app.config["LOG_BACKUP_COUNT"],
        )
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]"),
        )
        file_handler.setLevel(getattr(logging, app.config["LOG_LEVEL"]))
        app.logger.addHandler(file_handler)

        app.logger.setLevel(getattr(logging, app.config["LOG_LEVEL"]))
        app.logger.info("导航主页启动")
        get_system_logger().info("导航主页启动", module="system", started_at=app_start_time.isoformat())


def configure_template_filters(app: Flask) -> None:
    """注册模板过滤器."""

    @app.template_filter("china_datetime")
    def china_datetime_filter(dt: str | datetime) -> str:
        """东八区日期时间格式化过滤器."""
        return time_utils.format_china_time(dt, "%Y-%m-%d %H:%M:%S")


from navhome.models import (  # noqa: F401, E402
    category,
    pending_site,
    setting,
    site,
    user,
)
