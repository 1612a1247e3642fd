"""导航主页 - 首页快照缓存,基于 Flask-Caching.

按可见性分为 public / private 两类快照,任意写操作统一失效两类.
KV 读写失败一律视为未命中或空操作,不阻塞首页响应.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum

from flask_caching import Cache
from redis.exceptions import RedisError

from navhome.utils.structlog_config import get_logger

logger = get_logger("home_cache")

CACHE_EXCEPTIONS: tuple[type[Exception], ...] = (
    AttributeError,
    RuntimeError,
    ValueError,
    TypeError,
    OSError,
    RedisError,
)


class VisibilityClass(str, Enum):
    """首页快照的可见性分类."""

    PUBLIC = "public"
    PRIVATE = "private"

    @property
    def cache_key(self) -> str:
        return f"home_html_{self.value}"

    @classmethod
    def for_request(cls, *, authenticated: bool) -> VisibilityClass:
        return cls.PRIVATE if authenticated else cls.PUBLIC


ALL_CLASSES: frozenset[VisibilityClass] = frozenset(VisibilityClass)


class HomeSnapshotCache:
    """首页快照缓存.

    Attributes:
        cache: Flask-Caching 实例,未注入时所有读取视为未命中.
        ttl: 快照过期时间(秒),0 表示永不过期.

    """

    def __init__(self, cache: Cache | None = None, *, ttl: int = 0) -> None:
        self.cache = cache
        self.ttl = ttl

    def get(self, visibility: VisibilityClass) -> str | None:
        """读取快照.

        Returns:
            str | None: 命中返回快照文本,未命中或读取失败返回 None.

        """
        if not self.cache:
            return None
        try:
            snapshot = self.cache.get(visibility.cache_key)
        except CACHE_EXCEPTIONS as exc:
            logger.warning("读取首页快照失败", visibility=visibility.value, error=str(exc))
            return None
        if not isinstance(snapshot, str) or not snapshot:
            return None
        logger.debug("首页快照命中", visibility=visibility.value)
        return snapshot

    def put(self, visibility: VisibilityClass, snapshot: str) -> bool:
        """无条件覆盖写入快照.

        Returns:
            bool: 写入成功返回 True,失败返回 False.

        """
        if not self.cache:
            return False
        try:
            stored = self.cache.set(visibility.cache_key, snapshot, timeout=self.ttl)
        except CACHE_EXCEPTIONS as exc:
            logger.warning("写入首页快照失败", visibility=visibility.value, error=str(exc))
            return False
        logger.debug("首页快照已写入", visibility=visibility.value, size=len(snapshot), ttl=self.ttl)
        return bool(stored) if stored is not None else True

    def invalidate(self, classes: Iterable[VisibilityClass]) -> bool:
        """删除指定分类的快照.

        单个键删除失败不影响其余键,全部成功时返回 True.
        """
        if not self.cache:
            return True
        success = True
        for visibility in classes:
            try:
                self.cache.delete(visibility.cache_key)
            except CACHE_EXCEPTIONS as exc:
                success = False
                logger.warning("清除首页快照失败", visibility=visibility.value, error=str(exc))
        return success

    def invalidate_all(self) -> bool:
        """同时删除 public 与 private 快照,所有写操作都应调用."""
        success = self.invalidate(ALL_CLASSES)
        if success:
            logger.info("首页快照已全部失效")
        return success


home_snapshot_cache = HomeSnapshotCache()


def init_home_snapshot_cache(cache: Cache, *, ttl: int = 0) -> HomeSnapshotCache:
    """初始化首页快照缓存.

    Args:
        cache: Flask-Caching 实例.
        ttl: 快照过期时间(秒),0 表示永不过期.

    Returns:
        初始化后的 HomeSnapshotCache 实例.

    """
    home_snapshot_cache.cache = cache
    home_snapshot_cache.ttl = ttl
    logger.info("首页快照缓存初始化完成", ttl=ttl)
    return home_snapshot_cache


def invalidate_home_cache() -> bool:
    """写操作后调用,失效全部首页快照."""
    return home_snapshot_cache.invalidate_all()
