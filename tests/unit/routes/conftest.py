# tests/unit/routes/conftest.py
"""路由契约测试专用 fixtures.

提供 test_client、认证会话与首页示例数据相关的 fixtures.
"""

import pytest

from navhome import create_app, db
from navhome.models.category import Category
from navhome.models.site import Site
from navhome.models.user import User
from navhome.settings import Settings

ADMIN_USERNAME = "test_admin"
ADMIN_PASSWORD = "TestPass123"


@pytest.fixture(scope="function")
def app(monkeypatch):
    """创建测试应用实例,表结构在每个用例的内存库中单独创建."""
    monkeypatch.setenv("FLASK_ENV", "testing")
    monkeypatch.setenv("CACHE_TYPE", "simple")
    monkeypatch.setenv("ENABLE_PUBLIC_SUBMISSION", "true")
    monkeypatch.delenv("CACHE_REDIS_URL", raising=False)

    settings = Settings.load()
    app = create_app(settings=settings)
    app.config["TESTING"] = True
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope="function")
def client(app):
    """创建测试客户端."""
    return app.test_client()


@pytest.fixture(scope="function")
def auth_client(app):
    """创建已认证的测试客户端.

    自动创建测试管理员并设置会话。
    """
    with app.app_context():
        user = User(username=ADMIN_USERNAME, password=ADMIN_PASSWORD)
        db.session.add(user)
        db.session.commit()
        user_id = user.id

    client = app.test_client()
    with client.session_transaction() as session:
        session["_user_id"] = str(user_id)
        session["_fresh"] = True

    return client


@pytest.fixture(scope="function")
def seeded(app):
    """写入示例数据.

    - Dev(私密) > Tools,Tools 下的 SecretTool 继承私密
    - Open 分类下的 OpenSite 公开可见
    """
    with app.app_context():
        dev = Category(id=1, name="Dev", sort_order=1, parent_id=0, is_private=True)
        tools = Category(id=2, name="Tools", sort_order=1, parent_id=1, is_private=False)
        open_category = Category(id=3, name="Open", sort_order=2, parent_id=0, is_private=False)
        db.session.add_all([dev, tools, open_category])
        db.session.add_all(
            [
                Site(id=10, name="SecretTool", url="https://secret.example.com", category_id=2, category_name="Tools"),
                Site(id=11, name="OpenSite", url="https://open.example.com", category_id=3, category_name="Open"),
            ],
        )
        db.session.commit()
    return {"private_site_id": 10, "public_site_id": 11, "open_category_id": 3, "private_category_id": 1}
