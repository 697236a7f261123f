from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import datetime
from typing import Callable, Optional

from ..calendar.triple_days import StaticTripleDayCalendar, TripleDayCalendar
from ..common.datetime_utils import normalize_hhmm, now_local
from ..common.validators import require_non_empty
from ..core.enums import OvertimeStatus
from ..core.exceptions import InvalidStateTransition, NotFoundError, ValidationError
from .classifier import classify
from .model import AuditMeta, BulkCreateInput, DecisionInput, ListQuery, OvertimePatch, OvertimeRecord, Page
from .repository import OvertimeRepository
from .transitions import ensure_transition, is_editable

logger = logging.getLogger(__name__)


def _clean_reason(value: Optional[str]) -> Optional[str]:
    return (value or "").strip() or None


class OvertimeService:
    def __init__(
        self,
        records: OvertimeRepository,
        calendar: Optional[TripleDayCalendar] = None,
        *,
        clock: Callable[[], datetime] = now_local,
        id_factory: Callable[[], str] = lambda: uuid.uuid4().hex,
    ):
        self._records = records
        self._calendar = calendar or StaticTripleDayCalendar()
        self._clock = clock
        self._new_id = id_factory

    # ---------- Create ----------
    def create_bulk(self, data: BulkCreateInput, *, actor_id: str, meta: AuditMeta) -> list[OvertimeRecord]:
        """Classify every row and persist them together.

        Rows are checked in order; the first invalid row aborts the batch before
        anything reaches the store.
        """

        actor_id = require_non_empty(actor_id, "actor")
        if not data.rows:
            return []

        is_triple = data.is_triple_day
        if is_triple is None:
            is_triple = self._calendar.is_triple_day(data.work_date)

        now = self._clock()
        records: list[OvertimeRecord] = []
        for idx, row in enumerate(data.rows):
            try:
                employee_id = require_non_empty(row.employee_id, "employeeId")
                shift = require_non_empty(row.shift, "shift")
                in_time = normalize_hhmm(row.in_time)
                out_time = normalize_hhmm(row.out_time)
                minutes = classify(data.work_date, shift, in_time, out_time, is_triple)
            except ValidationError as e:
                raise ValidationError(f"rows[{idx}]: {e}") from e

            records.append(
                OvertimeRecord(
                    record_id=self._new_id(),
                    employee_id=employee_id,
                    work_date=data.work_date,
                    shift=shift,
                    in_time=in_time,
                    out_time=out_time,
                    reason=_clean_reason(row.reason),
                    status=OvertimeStatus.PENDING,
                    normal_minutes=minutes.normal_minutes,
                    double_minutes=minutes.double_minutes,
                    triple_minutes=minutes.triple_minutes,
                    is_night=minutes.is_night,
                    is_triple_day=bool(is_triple),
                    created_by=actor_id,
                    updated_by=actor_id,
                    created_at=now,
                    updated_at=now,
                )
            )

        self._records.create_many(records, meta=meta)
        logger.info(
            "Created %d overtime record(s) for %s by %s (triple_day=%s)",
            len(records),
            data.work_date.isoformat(),
            actor_id,
            is_triple,
        )
        return records

    # ---------- Update ----------
    def update(self, record_id: str, patch: OvertimePatch, *, actor_id: str, meta: AuditMeta) -> OvertimeRecord:
        actor_id = require_non_empty(actor_id, "actor")
        current = self._get_or_raise(record_id)
        if not is_editable(current.status):
            logger.warning("Refused update of %s record %s", current.status.value, current.record_id)
            raise InvalidStateTransition(f"Overtime record {current.record_id} is {current.status.value} and can no longer be edited")

        if patch.is_empty():
            return current

        shift = require_non_empty(patch.shift, "shift") if patch.shift is not None else current.shift
        in_time = normalize_hhmm(patch.in_time) if patch.in_time is not None else current.in_time
        out_time = normalize_hhmm(patch.out_time) if patch.out_time is not None else current.out_time
        reason = _clean_reason(patch.reason) if patch.reason is not None else current.reason

        updated = replace(
            current,
            shift=shift,
            in_time=in_time,
            out_time=out_time,
            reason=reason,
            updated_by=actor_id,
            updated_at=self._clock(),
        )
        if (shift, in_time, out_time) != (current.shift, current.in_time, current.out_time):
            minutes = classify(current.work_date, shift, in_time, out_time, current.is_triple_day)
            updated = replace(
                updated,
                normal_minutes=minutes.normal_minutes,
                double_minutes=minutes.double_minutes,
                triple_minutes=minutes.triple_minutes,
                is_night=minutes.is_night,
            )

        if not self._records.update_pending(updated, meta=meta):
            # Decided between our read and the conditional write.
            latest = self._get_or_raise(record_id)
            logger.warning("Lost update race on overtime record %s (now %s)", record_id, latest.status.value)
            raise InvalidStateTransition(f"Overtime record {record_id} is {latest.status.value} and can no longer be edited")

        logger.info("Overtime record %s updated by %s", record_id, actor_id)
        return updated

    # ---------- Decisions ----------
    def approve(self, record_id: str, decision: DecisionInput, *, actor_id: str, meta: AuditMeta) -> OvertimeRecord:
        return self._decide(record_id, OvertimeStatus.APPROVED, decision, actor_id=actor_id, meta=meta)

    def reject(self, record_id: str, decision: DecisionInput, *, actor_id: str, meta: AuditMeta) -> OvertimeRecord:
        return self._decide(record_id, OvertimeStatus.REJECTED, decision, actor_id=actor_id, meta=meta)

    def _decide(
        self,
        record_id: str,
        target: OvertimeStatus,
        decision: DecisionInput,
        *,
        actor_id: str,
        meta: AuditMeta,
    ) -> OvertimeRecord:
        actor_id = require_non_empty(actor_id, "actor")
        current = self._get_or_raise(record_id)
        try:
            ensure_transition(current.status, target)
        except InvalidStateTransition:
            logger.warning("Refused %s of %s record %s", target.value, current.status.value, record_id)
            raise

        at = self._clock()
        reason = _clean_reason(decision.reason)
        swapped = self._records.transition(
            current.record_id,
            from_status=current.status,
            to_status=target,
            actor_id=actor_id,
            reason=reason,
            at=at,
            meta=meta,
        )
        if not swapped:
            logger.warning("Concurrent decision on overtime record %s; %s refused", record_id, target.value)
            raise InvalidStateTransition(f"Overtime record {record_id} was already decided")

        logger.info("Overtime record %s %s by %s", record_id, target.value, actor_id)
        return replace(
            current,
            status=target,
            decided_by=actor_id,
            decided_at=at,
            decision_reason=reason,
            updated_by=actor_id,
            updated_at=at,
        )

    # ---------- Reads ----------
    def get(self, record_id: str) -> OvertimeRecord:
        return self._get_or_raise(record_id)

    def list(self, query: ListQuery) -> Page:
        if query.start and query.end and query.end < query.start:
            raise ValidationError("'to' must be on or after 'from'")
        items, total = self._records.list(query)
        return Page(items=list(items), page=query.page, limit=query.limit, total=int(total))

    def pending_count(self) -> int:
        return int(self._records.count_by_status(OvertimeStatus.PENDING))

    def _get_or_raise(self, record_id: str) -> OvertimeRecord:
        record_id = require_non_empty(record_id, "id")
        rec = self._records.get(record_id)
        if not rec:
            raise NotFoundError(f"Overtime record {record_id} not found")
        return rec
