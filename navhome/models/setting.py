"""
导航主页 - 主页设置模型
"""

from navhome import db


class Setting(db.Model):
    """主页设置键值对, 值统一以文本存储, 读取时按设置表声明的类型转换。"""

    __tablename__ = "settings"

    key = db.Column(db.String(100), primary_key=True)
    value = db.Column(db.Text, nullable=True)

    def __repr__(self) -> str:
        return f"<Setting {self.key}>"
