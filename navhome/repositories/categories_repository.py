"""分类 Repository.

职责:
- 仅负责 Query 组装与数据库读写
- 不做序列化、不返回 Response、不 commit
"""

from __future__ import annotations

from navhome import db
from navhome.models.category import Category
from navhome.models.site import Site


class CategoriesRepository:
    """分类查询 Repository."""

    @staticmethod
    def list_all() -> list[Category]:
        """按 (sort_order, id) 返回全部分类,私密性由调用方在内存中判定."""
        return Category.query.order_by(Category.sort_order.asc(), Category.id.asc()).all()

    @staticmethod
    def get_by_id(category_id: int) -> Category | None:
        return db.session.get(Category, category_id)

    @staticmethod
    def get_by_name(name: str) -> Category | None:
        return Category.query.filter(Category.name == name).first()

    @staticmethod
    def count_children(category_id: int) -> int:
        return Category.query.filter(Category.parent_id == category_id).count()

    @staticmethod
    def count_sites(category_id: int) -> int:
        return Site.query.filter(Site.category_id == category_id).count()

    @staticmethod
    def add(category: Category) -> Category:
        db.session.add(category)
        db.session.flush()
        return category

    @staticmethod
    def delete(category: Category) -> None:
        db.session.delete(category)
