"""登录 Service.

职责:
- 负责用户名/密码认证(避免路由层直接 query + check_password)
- 首次登录时按配置中的管理员账户初始化 users 表
- 按 IP 记录连续登录失败次数,超过上限后锁定一段时间
- 写入 Flask-Login 会话,不返回 Response、不 commit
"""

from __future__ import annotations

import hmac
from dataclasses import dataclass

from flask import current_app
from flask_login import login_user

from navhome import cache
from navhome.constants.system_constants import ErrorMessages
from navhome.errors import AuthenticationError, AuthorizationError, RateLimitError
from navhome.models.user import User
from navhome.repositories.users_repository import UsersRepository
from navhome.services.cache.home_cache_service import CACHE_EXCEPTIONS
from navhome.types.converters import as_str
from navhome.utils.structlog_config import get_auth_logger, log_warning
from navhome.utils.time_utils import time_utils


class LoginFailureTracker:
    """基于 Flask-Caching 的登录失败计数器.

    每次失败刷新计数的过期时间,计数达到上限即视为锁定,直到过期或登录成功后清除.
    KV 不可用时不锁定,只记录告警.
    """

    KEY_PREFIX = "login_fail"

    def __init__(self, *, max_attempts: int, lockout_seconds: int) -> None:
        self.max_attempts = max_attempts
        self.lockout_seconds = lockout_seconds

    @classmethod
    def from_config(cls) -> LoginFailureTracker:
        config = current_app.config
        return cls(
            max_attempts=int(config.get("LOGIN_MAX_ATTEMPTS", 5)),
            lockout_seconds=int(config.get("LOGIN_LOCKOUT_SECONDS", 900)),
        )

    def _key(self, identity: str) -> str:
        return f"{self.KEY_PREFIX}:{identity}"

    def failures(self, identity: str) -> int:
        try:
            return int(cache.get(self._key(identity)) or 0)
        except CACHE_EXCEPTIONS as exc:
            log_warning("读取登录失败计数失败,按未锁定处理", module="auth", exception=exc, identity=identity)
            return 0

    def is_locked(self, identity: str) -> bool:
        return self.failures(identity) >= self.max_attempts

    def record_failure(self, identity: str) -> int:
        """记录一次失败,返回累计次数."""
        count = self.failures(identity) + 1
        try:
            cache.set(self._key(identity), count, timeout=self.lockout_seconds)
        except CACHE_EXCEPTIONS as exc:
            log_warning("记录登录失败次数失败", module="auth", exception=exc, identity=identity)
        return count

    def clear(self, identity: str) -> None:
        try:
            cache.delete(self._key(identity))
        except CACHE_EXCEPTIONS as exc:
            log_warning("清除登录失败计数失败", module="auth", exception=exc, identity=identity)


@dataclass(frozen=True, slots=True)
class LoginResult:
    """登录结果(供 API 层封套返回)."""

    user: dict[str, object]

    def to_payload(self) -> dict[str, object]:
        return {"user": self.user}


class LoginService:
    """登录编排服务."""

    def __init__(self, repository: UsersRepository | None = None) -> None:
        self._repository = repository or UsersRepository()

    def login_from_payload(self, payload: object | None, *, client_ip: str | None = None) -> LoginResult:
        """从表单或 JSON payload 解析并执行登录.

        Args:
            payload: 包含 username/password 的表单或 JSON.
            client_ip: 客户端 IP,提供时启用失败锁定.

        Raises:
            RateLimitError: 该 IP 连续失败次数已达上限.
            AuthenticationError: 字段缺失或用户名密码错误.

        """
        tracker = LoginFailureTracker.from_config() if client_ip else None
        if tracker is not None and tracker.is_locked(client_ip):
            get_auth_logger().warning("登录已被锁定", module="auth", ip_address=client_ip)
            raise RateLimitError(
                ErrorMessages.LOGIN_LOCKED,
                message_key="LOGIN_LOCKED",
                extra={"client_ip": client_ip, "lockout_seconds": tracker.lockout_seconds},
            )

        data = payload if isinstance(payload, dict) else {}
        username = as_str(data.get("username")).strip()
        password = as_str(data.get("password"))
        if not username or not password:
            raise AuthenticationError(
                message=ErrorMessages.INVALID_CREDENTIALS,
                message_key="INVALID_CREDENTIALS",
            )

        try:
            result = self.login(username=username, password=password)
        except AuthenticationError:
            if tracker is not None:
                attempts = tracker.record_failure(client_ip)
                get_auth_logger().warning("记录登录失败", module="auth", ip_address=client_ip, attempts=attempts)
            raise
        if tracker is not None:
            tracker.clear(client_ip)
        return result

    def authenticate(self, *, username: str, password: str) -> User | None:
        """认证用户名与密码.

        数据库中不存在该用户时,与配置的管理员账户比对,
        匹配则创建对应的 User 记录.

        Returns:
            User | None: 认证成功返回 User,否则返回 None.

        """
        user = self._repository.get_by_username(username)
        if user is not None:
            return user if user.check_password(password) else None
        return self._bootstrap_admin(username=username, password=password)

    def _bootstrap_admin(self, *, username: str, password: str) -> User | None:
        config = current_app.config
        admin_username = config.get("ADMIN_USERNAME")
        admin_password = config.get("ADMIN_PASSWORD")
        if not admin_username or not admin_password:
            return None
        if not (
            hmac.compare_digest(username.encode(), str(admin_username).encode())
            and hmac.compare_digest(password.encode(), str(admin_password).encode())
        ):
            return None

        user = self._repository.add(User(username=username, password=password))
        get_auth_logger().info("初始化管理员账户", module="auth", username=username)
        return user

    def login(self, *, username: str, password: str) -> LoginResult:
        """登录入口: 认证并写入会话.

        Raises:
            AuthenticationError: 当用户名或密码错误.
            AuthorizationError: 当用户被禁用.

        """
        user = self.authenticate(username=username, password=password)
        if user is None:
            get_auth_logger().warning("登录失败", module="auth", username=username)
            raise AuthenticationError(
                message=ErrorMessages.INVALID_CREDENTIALS,
                message_key="INVALID_CREDENTIALS",
            )
        if not user.is_active:
            raise AuthorizationError(
                message=ErrorMessages.ACCOUNT_DISABLED,
                message_key="ACCOUNT_DISABLED",
            )

        login_user(user, remember=True)
        user.last_login = time_utils.now()
        get_auth_logger().info("登录成功", module="auth", user_id=user.id)
        return LoginResult(user=user.to_dict())
