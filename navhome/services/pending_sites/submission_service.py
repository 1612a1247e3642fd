"""公共提交与审核 Service.

职责:
- 校验公共提交开关与按 IP 的提交频率
- 将提交暂存到 pending_sites,管理员审核通过后写入 sites
- 不返回 Response、不 commit
"""

from __future__ import annotations

from collections.abc import Mapping

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from navhome import cache, db
from navhome.constants.system_constants import ErrorMessages
from navhome.errors import AuthorizationError, NotFoundError, RateLimitError, ValidationError
from navhome.models.pending_site import PendingSite
from navhome.models.site import Site
from navhome.repositories.categories_repository import CategoriesRepository
from navhome.repositories.pending_sites_repository import PendingSitesRepository
from navhome.services.cache.home_cache_service import CACHE_EXCEPTIONS
from navhome.services.sites.site_write_service import SiteWriteService
from navhome.types.converters import as_int, as_optional_str, as_str
from navhome.utils.route_safety import log_with_context
from navhome.utils.structlog_config import log_warning

UNKNOWN_CATEGORY_NAME = "Unknown"


class SubmissionRateLimiter:
    """基于 Flask-Caching 的固定窗口计数器.

    KV 不可用时放行,只记录告警.
    """

    KEY_PREFIX = "submit_rate"

    def __init__(self, *, limit: int, window: int) -> None:
        self.limit = limit
        self.window = window

    def hit(self, identity: str) -> bool:
        """记录一次提交,返回是否仍在限额内."""
        key = f"{self.KEY_PREFIX}:{identity}"
        try:
            count = int(cache.get(key) or 0)
            if count >= self.limit:
                return False
            cache.set(key, count + 1, timeout=self.window)
        except CACHE_EXCEPTIONS as exc:
            log_warning("提交频率计数失败,放行本次提交", module="pending_sites", exception=exc, identity=identity)
        return True


class SubmissionService:
    """公共提交与审核服务."""

    def __init__(
        self,
        repository: PendingSitesRepository | None = None,
        categories_repository: CategoriesRepository | None = None,
        site_writer: SiteWriteService | None = None,
    ) -> None:
        self._repository = repository or PendingSitesRepository()
        self._categories = categories_repository or CategoriesRepository()
        self._site_writer = site_writer or SiteWriteService()

    @staticmethod
    def submission_enabled() -> bool:
        return bool(current_app.config.get("ENABLE_PUBLIC_SUBMISSION", False))

    def submit(self, payload: Mapping[str, object], *, client_ip: str) -> PendingSite:
        """暂存一条公共提交.

        Raises:
            AuthorizationError: 公共提交未开启.
            RateLimitError: 同一 IP 提交过于频繁.
            ValidationError: 名称、地址或分类缺失.

        """
        if not self.submission_enabled():
            raise AuthorizationError(ErrorMessages.SUBMISSION_DISABLED)

        limiter = SubmissionRateLimiter(
            limit=int(current_app.config.get("SUBMIT_RATE_LIMIT", 5)),
            window=int(current_app.config.get("SUBMIT_RATE_WINDOW", 60)),
        )
        if not limiter.hit(client_ip):
            raise RateLimitError(extra={"client_ip": client_ip})

        name = as_str(payload.get("name")).strip()
        url = as_str(payload.get("url")).strip()
        category_id = as_int(payload.get("category_id"))
        if not name or not url or not category_id:
            raise ValidationError(ErrorMessages.MISSING_REQUIRED_FIELDS.format(fields="name, url, category_id"))

        category = self._categories.get_by_id(category_id)
        pending = PendingSite(
            name=name,
            url=url,
            logo=as_optional_str(payload.get("logo")),
            description=as_optional_str(payload.get("description")),
            category_id=category_id,
            category_name=category.name if category is not None else UNKNOWN_CATEGORY_NAME,
        )
        try:
            self._repository.add(pending)
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise ValidationError("提交失败,请稍后再试", extra={"exception": str(exc)}) from exc

        log_with_context(
            "info",
            "收到公共提交",
            module="pending_sites",
            action="submit_site",
            context={"pending_id": pending.id, "client_ip": client_ip},
            extra={"category_id": category_id},
            include_actor=False,
        )
        return pending

    def list_pending(self) -> list[dict]:
        return [pending.to_dict() for pending in self._repository.list_all()]

    def approve(self, pending_id: int, *, operator_id: int | None = None) -> Site:
        """审核通过,按管理端规则写入书签并删除暂存记录."""
        pending = self._get_or_raise(pending_id)
        site = self._site_writer.create(
            {
                "name": pending.name,
                "url": pending.url,
                "logo": pending.logo,
                "description": pending.description,
                "category_id": pending.category_id,
            },
            operator_id=operator_id,
        )
        self._repository.delete(pending)
        log_with_context(
            "info",
            "审核通过公共提交",
            module="pending_sites",
            action="approve_pending",
            context={"pending_id": pending_id, "site_id": site.id, "operator_id": operator_id},
        )
        return site

    def reject(self, pending_id: int, *, operator_id: int | None = None) -> None:
        pending = self._get_or_raise(pending_id)
        self._repository.delete(pending)
        log_with_context(
            "info",
            "拒绝公共提交",
            module="pending_sites",
            action="reject_pending",
            context={"pending_id": pending_id, "operator_id": operator_id},
        )

    def _get_or_raise(self, pending_id: int) -> PendingSite:
        pending = self._repository.get_by_id(pending_id)
        if pending is None:
            raise NotFoundError(ErrorMessages.PENDING_SITE_NOT_FOUND, extra={"pending_id": pending_id})
        return pending
