"""
导航主页 - 书签模型
"""

from navhome import db
from navhome.models.category import DEFAULT_SORT_ORDER
from navhome.utils.time_utils import time_utils


class Site(db.Model):
    """书签模型。

    category_name 是保存时冗余的分类名称, 仅用于展示。
    可见性判定始终以 category_id 所指分类的有效私密性为准。

    Attributes:
        id: 书签主键。
        name: 名称。
        url: 目标地址。
        logo: 图标地址, 可为空。
        description: 描述, 可为空。
        category_id: 所属分类 ID。
        category_name: 冗余的分类名称。
        sort_order: 排序值, 9999 表示未设置。
        is_private: 自身私密标记。
    """

    __tablename__ = "sites"
    __table_args__ = (
        db.Index("idx_sites_category_id", "category_id"),
        db.Index("idx_sites_sort_order", "sort_order"),
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    url = db.Column(db.String(2048), nullable=False)
    logo = db.Column(db.String(2048), nullable=True)
    description = db.Column(db.Text, nullable=True)
    category_id = db.Column(db.Integer, nullable=False)
    category_name = db.Column(db.String(100), nullable=True)
    sort_order = db.Column(db.Integer, default=DEFAULT_SORT_ORDER, nullable=False)
    is_private = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=time_utils.now)
    updated_at = db.Column(db.DateTime(timezone=True), default=time_utils.now, onupdate=time_utils.now)

    def to_dict(self) -> dict:
        """转换为字典。"""
        return {
            "id": self.id,
            "name": self.name,
            "url": self.url,
            "logo": self.logo,
            "description": self.description,
            "category_id": self.category_id,
            "category_name": self.category_name,
            "sort_order": self.sort_order,
            "is_private": bool(self.is_private),
            "created_at": time_utils.to_json_serializable(self.created_at),
            "updated_at": time_utils.to_json_serializable(self.updated_at),
        }

    def __repr__(self) -> str:
        return f"<Site {self.name}>"
