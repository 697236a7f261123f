from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import OvertimeStatus
from .model import AuditMeta, ListQuery, OvertimeRecord


class OvertimeRepository(Protocol):
    def create_many(self, records: Sequence[OvertimeRecord], *, meta: AuditMeta) -> None:
        """Insert every record (and its CREATE audit entry) or none of them."""

        raise NotImplementedError

    def get(self, record_id: str) -> Optional[OvertimeRecord]:
        raise NotImplementedError

    def update_pending(self, record: OvertimeRecord, *, meta: AuditMeta) -> bool:
        """Persist patchable fields and breakdown; False if the stored row is no longer PENDING."""

        raise NotImplementedError

    def transition(
        self,
        record_id: str,
        *,
        from_status: OvertimeStatus,
        to_status: OvertimeStatus,
        actor_id: str,
        reason: Optional[str],
        at: datetime,
        meta: AuditMeta,
    ) -> bool:
        """Compare-and-swap on status; False when the stored status is not `from_status`."""

        raise NotImplementedError

    def list(self, query: ListQuery) -> tuple[list[OvertimeRecord], int]:
        raise NotImplementedError

    def count_by_status(self, status: OvertimeStatus) -> int:
        raise NotImplementedError

    def list_recent(self, *, status: OvertimeStatus, limit: int) -> Sequence[OvertimeRecord]:
        raise NotImplementedError

    def list_for_range(self, *, start: date, end: date) -> Sequence[OvertimeRecord]:
        raise NotImplementedError
