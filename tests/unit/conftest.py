# tests/unit/conftest.py
"""单元测试专用 fixtures.

提供隔离环境变量与首页数据构造相关的通用 fixtures.
"""

import pytest


@pytest.fixture(autouse=True)
def _unit_test_env(monkeypatch):
    """为 unit tests 强制注入隔离环境变量.

    目标:
    - unit tests 不依赖外部 Redis/数据库等基础设施
    - 避免开发者本机环境变量影响测试稳定性
    """
    monkeypatch.setenv("FLASK_ENV", "testing")
    monkeypatch.setenv("CACHE_TYPE", "simple")
    monkeypatch.delenv("CACHE_REDIS_URL", raising=False)
    monkeypatch.delenv("ADMIN_USERNAME", raising=False)
    monkeypatch.delenv("ADMIN_PASSWORD", raising=False)


@pytest.fixture
def dev_tools_categories():
    """私密父分类 Dev 与其公开子分类 Tools."""
    return [
        {"id": 1, "name": "Dev", "parent": 0, "private": True},
        {"id": 2, "name": "Tools", "parent": 1, "private": False},
    ]
