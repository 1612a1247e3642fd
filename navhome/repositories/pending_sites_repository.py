"""待审核书签 Repository."""

from __future__ import annotations

from navhome import db
from navhome.models.pending_site import PendingSite


class PendingSitesRepository:
    """公共提交暂存表读写."""

    @staticmethod
    def list_all() -> list[PendingSite]:
        return PendingSite.query.order_by(PendingSite.created_at.desc(), PendingSite.id.desc()).all()

    @staticmethod
    def get_by_id(pending_id: int) -> PendingSite | None:
        return db.session.get(PendingSite, pending_id)

    @staticmethod
    def add(pending: PendingSite) -> PendingSite:
        db.session.add(pending)
        db.session.flush()
        return pending

    @staticmethod
    def delete(pending: PendingSite) -> None:
        db.session.delete(pending)
