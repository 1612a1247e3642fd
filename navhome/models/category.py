"""
导航主页 - 分类模型
"""

from navhome import db
from navhome.utils.time_utils import time_utils

DEFAULT_SORT_ORDER = 9999
ROOT_PARENT_ID = 0


class Category(db.Model):
    """分类模型。

    分类通过 parent_id 组成森林, parent_id 为 0 表示根节点。
    is_private 只记录自身标记, 子孙节点的有效私密性在读取时计算。

    Attributes:
        id: 分类主键。
        name: 分类显示名称。
        sort_order: 排序值, 9999 表示未设置。
        parent_id: 父分类 ID, 0 表示根。
        is_private: 自身私密标记。
        created_at: 创建时间。
        updated_at: 更新时间。
    """

    __tablename__ = "category"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False, unique=True)
    sort_order = db.Column(db.Integer, default=DEFAULT_SORT_ORDER, nullable=False)
    parent_id = db.Column(db.Integer, default=ROOT_PARENT_ID, nullable=False)
    is_private = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=time_utils.now)
    updated_at = db.Column(db.DateTime(timezone=True), default=time_utils.now, onupdate=time_utils.now)

    def to_dict(self) -> dict:
        """转换为字典。"""
        return {
            "id": self.id,
            "name": self.name,
            "sort_order": self.sort_order,
            "parent_id": self.parent_id or ROOT_PARENT_ID,
            "is_private": bool(self.is_private),
            "created_at": time_utils.to_json_serializable(self.created_at),
            "updated_at": time_utils.to_json_serializable(self.updated_at),
        }

    def __repr__(self) -> str:
        return f"<Category {self.name}>"
