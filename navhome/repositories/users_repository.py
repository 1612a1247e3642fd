"""管理员 Repository."""

from __future__ import annotations

from navhome import db
from navhome.models.user import User


class UsersRepository:
    """管理员账户查询."""

    @staticmethod
    def get_by_id(user_id: int) -> User | None:
        return db.session.get(User, user_id)

    @staticmethod
    def get_by_username(username: str) -> User | None:
        return User.query.filter(User.username == username).first()

    @staticmethod
    def count() -> int:
        return User.query.count()

    @staticmethod
    def add(user: User) -> User:
        db.session.add(user)
        db.session.flush()
        return user
