"""书签 Repository.

职责:
- 仅负责 Query 组装与数据库读写
- 不做序列化、不返回 Response、不 commit
"""

from __future__ import annotations

from navhome import db
from navhome.models.site import Site


class SitesRepository:
    """书签查询 Repository."""

    @staticmethod
    def list_all() -> list[Site]:
        """按 sort_order 升序、创建时间倒序返回全部书签.

        私密性(含分类继承)由调用方在读取后统一计算,这里不做过滤.
        """
        return Site.query.order_by(Site.sort_order.asc(), Site.created_at.desc(), Site.id.desc()).all()

    @staticmethod
    def get_by_id(site_id: int) -> Site | None:
        return db.session.get(Site, site_id)

    @staticmethod
    def rename_category(category_id: int, category_name: str) -> int:
        """同步冗余的分类名称,返回受影响行数."""
        return Site.query.filter(Site.category_id == category_id).update(
            {Site.category_name: category_name},
            synchronize_session=False,
        )

    @staticmethod
    def add(site: Site) -> Site:
        db.session.add(site)
        db.session.flush()
        return site

    @staticmethod
    def delete(site: Site) -> None:
        db.session.delete(site)
