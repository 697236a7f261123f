from __future__ import annotations

import json
from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import AuditAction, OvertimeStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AuditMeta, ListQuery, OvertimeRecord
from .repository import OvertimeRepository

_COLUMNS = """
    record_id, employee_id, work_date, shift, in_time, out_time, reason, status,
    normal_minutes, double_minutes, triple_minutes, is_night, is_triple_day,
    created_by, updated_by, created_at, updated_at, decided_by, decided_at, decision_reason
"""

_DECISION_ACTIONS = {
    OvertimeStatus.APPROVED: AuditAction.APPROVE,
    OvertimeStatus.REJECTED: AuditAction.REJECT,
}


def _to_record(r: dict) -> OvertimeRecord:
    return OvertimeRecord(
        record_id=str(r["record_id"]),
        employee_id=str(r["employee_id"]),
        work_date=r["work_date"],
        shift=r["shift"],
        in_time=r["in_time"],
        out_time=r["out_time"],
        reason=r.get("reason"),
        status=OvertimeStatus(r["status"]),
        normal_minutes=int(r["normal_minutes"]),
        double_minutes=int(r["double_minutes"]),
        triple_minutes=int(r["triple_minutes"]),
        is_night=bool(r["is_night"]),
        is_triple_day=bool(r["is_triple_day"]),
        created_by=str(r["created_by"]),
        updated_by=str(r["updated_by"]),
        created_at=r["created_at"],
        updated_at=r["updated_at"],
        decided_by=r.get("decided_by"),
        decided_at=r.get("decided_at"),
        decision_reason=r.get("decision_reason"),
    )


class MySQLOvertimeRepository(OvertimeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _insert_audit(cur, *, record_id: str, action: AuditAction, actor_id: str, meta: AuditMeta, at: datetime) -> None:
        cur.execute(
            """
            INSERT INTO overtime_audit_log(record_id, action, actor_id, meta, created_at)
            VALUES(%s,%s,%s,%s,%s)
            """,
            (record_id, action.value, actor_id, json.dumps(meta.as_dict()), at),
        )

    def create_many(self, records: Sequence[OvertimeRecord], *, meta: AuditMeta) -> None:
        if not records:
            return
        with db_cursor(self._conn_factory) as (_, cur):
            cur.executemany(
                f"""
                INSERT INTO overtime_records({_COLUMNS})
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                [
                    (
                        r.record_id,
                        r.employee_id,
                        r.work_date,
                        r.shift,
                        r.in_time,
                        r.out_time,
                        r.reason,
                        r.status.value,
                        r.normal_minutes,
                        r.double_minutes,
                        r.triple_minutes,
                        int(r.is_night),
                        int(r.is_triple_day),
                        r.created_by,
                        r.updated_by,
                        r.created_at,
                        r.updated_at,
                        r.decided_by,
                        r.decided_at,
                        r.decision_reason,
                    )
                    for r in records
                ],
            )
            for r in records:
                self._insert_audit(
                    cur, record_id=r.record_id, action=AuditAction.CREATE, actor_id=r.created_by, meta=meta, at=r.created_at
                )

    def get(self, record_id: str) -> Optional[OvertimeRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM overtime_records WHERE record_id=%s", (str(record_id),))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def update_pending(self, record: OvertimeRecord, *, meta: AuditMeta) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE overtime_records
                SET shift=%s, in_time=%s, out_time=%s, reason=%s,
                    normal_minutes=%s, double_minutes=%s, triple_minutes=%s, is_night=%s,
                    updated_by=%s, updated_at=%s
                WHERE record_id=%s AND status=%s
                """,
                (
                    record.shift,
                    record.in_time,
                    record.out_time,
                    record.reason,
                    record.normal_minutes,
                    record.double_minutes,
                    record.triple_minutes,
                    int(record.is_night),
                    record.updated_by,
                    record.updated_at,
                    record.record_id,
                    OvertimeStatus.PENDING.value,
                ),
            )
            if cur.rowcount <= 0:
                return False
            self._insert_audit(
                cur,
                record_id=record.record_id,
                action=AuditAction.UPDATE,
                actor_id=record.updated_by,
                meta=meta,
                at=record.updated_at,
            )
            return True

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE overtime_records
                SET status=%s, decided_by=%s, decided_at=%s, decision_reason=%s,
                    updated_by=%s, updated_at=%s
                WHERE record_id=%s AND status=%s
                """,
                (
                    to_status.value,
                    actor_id,
                    at,
                    reason,
                    actor_id,
                    at,
                    str(record_id),
                    from_status.value,
                ),
            )
            if cur.rowcount <= 0:
                return False
            self._insert_audit(
                cur, record_id=str(record_id), action=_DECISION_ACTIONS[to_status], actor_id=actor_id, meta=meta, at=at
            )
            return True

    def list(self, query: ListQuery) -> tuple[list[OvertimeRecord], int]:
        clauses = ["1=1"]
        params: list[object] = []

        if query.start is not None:
            clauses.append("work_date>=%s")
            params.append(query.start)
        if query.end is not None:
            clauses.append("work_date<=%s")
            params.append(query.end)
        if query.status is not None:
            clauses.append("status=%s")
            params.append(query.status.value)
        if query.employee_id:
            clauses.append("employee_id=%s")
            params.append(query.employee_id)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS n FROM overtime_records WHERE {where}", tuple(params))
            total = int((fetchone(cur) or {}).get("n", 0))

            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM overtime_records
                WHERE {where}
                ORDER BY seq ASC
                LIMIT %s OFFSET %s
                """,
                tuple(params + [int(query.limit), int(query.offset)]),
            )
            return [_to_record(r) for r in fetchall(cur)], total

    def count_by_status(self, status: OvertimeStatus) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM overtime_records WHERE status=%s", (status.value,))
            r = fetchone(cur)
            return int(r["n"]) if r else 0

    def list_recent(self, *, status: OvertimeStatus, limit: int) -> Sequence[OvertimeRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM overtime_records
                WHERE status=%s
                ORDER BY seq DESC
                LIMIT %s
                """,
                (status.value, int(limit)),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_for_range(self, *, start: date, end: date) -> Sequence[OvertimeRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM overtime_records
                WHERE work_date BETWEEN %s AND %s
                ORDER BY work_date ASC, seq ASC
                """,
                (start, end),
            )
            return [_to_record(r) for r in fetchall(cur)]
