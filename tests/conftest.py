from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Optional

import pytest

from overtime_system.core.enums import AuditAction, OvertimeStatus
from overtime_system.overtime.model import AuditMeta, ListQuery, OvertimeAuditEntry, OvertimeRecord


class InMemoryOvertimeRepo:
    def __init__(self):
        self._rows: dict[str, OvertimeRecord] = {}
        # insertion order, like the AUTO_INCREMENT seq column
        self._seq: dict[str, int] = {}
        self.audit: list[OvertimeAuditEntry] = []
        self.create_calls = 0

    def create_many(self, records, *, meta):
        self.create_calls += 1
        for r in records:
            self._remember(r.record_id)
            self._rows[r.record_id] = r
            self.audit.append(OvertimeAuditEntry(r.record_id, AuditAction.CREATE, r.created_by, meta, r.created_at))

    def get(self, record_id) -> Optional[OvertimeRecord]:
        return self._rows.get(record_id)

    def update_pending(self, record, *, meta):
        cur = self._rows.get(record.record_id)
        if not cur or cur.status != OvertimeStatus.PENDING:
            return False
        self._rows[record.record_id] = record
        self.audit.append(OvertimeAuditEntry(record.record_id, AuditAction.UPDATE, record.updated_by, meta, record.updated_at))
        return True

    def transition(self, record_id, *, from_status, to_status, actor_id, reason, at, meta):
        cur = self._rows.get(record_id)
        if not cur or cur.status != from_status:
            return False
        self._rows[record_id] = replace(
            cur,
            status=to_status,
            decided_by=actor_id,
            decided_at=at,
            decision_reason=reason,
            updated_by=actor_id,
            updated_at=at,
        )
        action = AuditAction.APPROVE if to_status == OvertimeStatus.APPROVED else AuditAction.REJECT
        self.audit.append(OvertimeAuditEntry(record_id, action, actor_id, meta, at))
        return True

    def list(self, query: ListQuery):
        items = [
            r
            for r in self._rows.values()
            if (query.start is None or r.work_date >= query.start)
            and (query.end is None or r.work_date <= query.end)
            and (query.status is None or r.status == query.status)
            and (not query.employee_id or r.employee_id == query.employee_id)
        ]
        items.sort(key=lambda r: self._seq[r.record_id])
        return items[query.offset : query.offset + query.limit], len(items)

    def count_by_status(self, status):
        return sum(1 for r in self._rows.values() if r.status == status)

    def list_recent(self, *, status, limit):
        items = [r for r in self._rows.values() if r.status == status]
        items.sort(key=lambda r: self._seq[r.record_id], reverse=True)
        return items[:limit]

    def list_for_range(self, *, start, end):
        items = [r for r in self._rows.values() if start <= r.work_date <= end]
        items.sort(key=lambda r: (r.work_date, self._seq[r.record_id]))
        return items

    def _remember(self, record_id: str) -> None:
        self._seq.setdefault(record_id, len(self._seq) + 1)

    # test helper
    def put(self, record: OvertimeRecord) -> OvertimeRecord:
        self._remember(record.record_id)
        self._rows[record.record_id] = record
        return record


class TickingClock:
    """Returns a strictly increasing datetime on every call."""

    def __init__(self, start: datetime = datetime(2024, 6, 10, 9, 0, 0)):
        self._now = start

    def __call__(self) -> datetime:
        self._now += timedelta(seconds=1)
        return self._now


class SequentialIds:
    def __init__(self):
        self._n = 0

    def __call__(self) -> str:
        self._n += 1
        return f"ot{self._n:04d}"


def make_record(
    record_id: str = "ot0001",
    *,
    employee_id: str = "E001",
    work_date: date = date(2024, 6, 10),
    status: OvertimeStatus = OvertimeStatus.PENDING,
    created_at: datetime = datetime(2024, 6, 10, 9, 0, 0),
    normal_minutes: int = 0,
    double_minutes: int = 0,
    triple_minutes: int = 0,
) -> OvertimeRecord:
    return OvertimeRecord(
        record_id=record_id,
        employee_id=employee_id,
        work_date=work_date,
        shift="Shift 2",
        in_time="08:00",
        out_time="17:00",
        reason=None,
        status=status,
        normal_minutes=normal_minutes,
        double_minutes=double_minutes,
        triple_minutes=triple_minutes,
        is_night=False,
        is_triple_day=False,
        created_by="u1",
        updated_by="u1",
        created_at=created_at,
        updated_at=created_at,
    )


@pytest.fixture
def repo() -> InMemoryOvertimeRepo:
    return InMemoryOvertimeRepo()


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock()


@pytest.fixture
def ids() -> SequentialIds:
    return SequentialIds()


@pytest.fixture
def meta() -> AuditMeta:
    return AuditMeta(ip="127.0.0.1", user_agent="pytest", route="/ot")


@pytest.fixture
def record_factory():
    return make_record
