"""
导航主页 - 待审核书签模型
"""

from navhome import db
from navhome.utils.time_utils import time_utils


class PendingSite(db.Model):
    """公共提交暂存表, 管理员审核通过后写入 sites。"""

    __tablename__ = "pending_sites"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    url = db.Column(db.String(2048), nullable=False)
    logo = db.Column(db.String(2048), nullable=True)
    description = db.Column(db.Text, nullable=True)
    category_id = db.Column(db.Integer, nullable=False)
    category_name = db.Column(db.String(100), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), default=time_utils.now)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "url": self.url,
            "logo": self.logo,
            "description": self.description,
            "category_id": self.category_id,
            "category_name": self.category_name,
            "created_at": time_utils.to_json_serializable(self.created_at),
        }
