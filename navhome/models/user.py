"""导航主页 - 管理员模型."""

from flask_login import UserMixin

from navhome import bcrypt, db
from navhome.utils.time_utils import time_utils

MIN_USER_PASSWORD_LENGTH = 8


class User(UserMixin, db.Model):
    """管理员模型.

    继承 Flask-Login 的 UserMixin 提供会话管理功能.登录即视为管理员,
    首页渲染只关心"是否已认证"这一布尔能力.

    Attributes:
        id: 用户 ID,主键.
        username: 用户名,唯一索引.
        password: 加密后的密码(bcrypt).
        created_at: 创建时间.
        last_login: 最后登录时间.
        is_active: 是否启用.

    """

    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=time_utils.now)
    last_login = db.Column(db.DateTime(timezone=True), nullable=True)
    is_active: bool = db.Column(db.Boolean, default=True, nullable=False)  # pyright: ignore[reportIncompatibleMethodOverride]

    def __init__(self, username: str | None = None, password: str | None = None) -> None:
        if username is not None:
            self.username = username
        if password is not None:
            self.set_password(password)

    def set_password(self, password: str) -> None:
        """设置密码(加密).

        Args:
            password: 原始密码.

        Raises:
            ValueError: 当密码长度不足时抛出.

        """
        if len(password) < MIN_USER_PASSWORD_LENGTH:
            error_msg = f"密码长度至少{MIN_USER_PASSWORD_LENGTH}位"
            raise ValueError(error_msg)
        self.password = bcrypt.generate_password_hash(password).decode("utf-8")

    def check_password(self, password: str) -> bool:
        """验证密码."""
        return bcrypt.check_password_hash(self.password, password)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "username": self.username,
            "last_login": time_utils.to_json_serializable(self.last_login),
            "is_active": self.is_active,
        }

    def __repr__(self) -> str:
        return f"<User {self.username}>"
