from __future__ import annotations

from typing import Optional

from ..core.constants import DEFAULT_NOTIFICATION_LIMIT, MAX_NOTIFICATION_LIMIT
from ..core.enums import OvertimeStatus
from ..overtime.model import OvertimeRecord
from ..overtime.repository import OvertimeRepository


class NotificationService:
    """Newest pending overtime records, for operator alerting."""

    def __init__(self, records: OvertimeRepository, *, max_limit: int = MAX_NOTIFICATION_LIMIT):
        self._records = records
        self._max_limit = int(max_limit)

    def pending(self, limit: Optional[int] = None) -> list[OvertimeRecord]:
        n = DEFAULT_NOTIFICATION_LIMIT if limit is None else int(limit)
        n = max(1, min(n, self._max_limit))
        return list(self._records.list_recent(status=OvertimeStatus.PENDING, limit=n))[:n]
