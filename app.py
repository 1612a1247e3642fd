"""导航主页 - 本地开发环境启动文件."""

from __future__ import annotations

import os
from typing import Final

from navhome import create_app
from navhome.utils.structlog_config import get_system_logger

os.environ.setdefault("FLASK_APP", "navhome")
os.environ.setdefault("FLASK_ENV", "development")

DEFAULT_HOST: Final[str] = "127.0.0.1"
DEFAULT_PORT: Final[str] = "5001"
DEFAULT_DEBUG: Final[str] = "true"


def _load_runtime_config() -> tuple[str, int, bool]:
    """读取开发服务器运行参数."""
    host = os.environ.get("FLASK_HOST") or DEFAULT_HOST
    port = int(os.environ.get("FLASK_PORT", DEFAULT_PORT))
    debug = os.environ.get("FLASK_DEBUG", DEFAULT_DEBUG).lower() == "true"
    return host, port, debug


def _log_startup_instructions(host: str, port: int, *, debug: bool) -> None:
    """输出常见的本地访问说明, 便于开发者查阅."""
    logger = get_system_logger()
    logger.info("导航主页开发环境已启动", host=host, port=port, debug=debug)
    logger.info("访问入口", url=f"http://{host}:{port}")
    logger.info("管理员登录", url=f"http://{host}:{port}/admin/login", hint="首次登录使用 ADMIN_USERNAME / ADMIN_PASSWORD")


def main() -> None:
    """启动 Flask 开发服务器并打印辅助信息."""
    app = create_app()
    host, port, debug = _load_runtime_config()
    _log_startup_instructions(host, port, debug=debug)

    app.run(host=host, port=port, debug=debug, threaded=True, use_reloader=False)


if __name__ == "__main__":
    main()
