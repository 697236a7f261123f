from __future__ import annotations

from dataclasses import replace
from datetime import date

import pytest

from overtime_system.calendar.triple_days import StaticTripleDayCalendar
from overtime_system.core.enums import AuditAction, OvertimeStatus
from overtime_system.core.exceptions import InvalidStateTransition, NotFoundError, ValidationError
from overtime_system.notifications.service import NotificationService
from overtime_system.overtime.model import BulkCreateInput, BulkRow, DecisionInput, ListQuery, OvertimePatch
from overtime_system.overtime.service import OvertimeService

MONDAY = date(2024, 6, 10)


@pytest.fixture
def svc(repo, clock, ids):
    return OvertimeService(repo, StaticTripleDayCalendar(), clock=clock, id_factory=ids)


def _rows():
    return [
        BulkRow(employee_id="E001", shift="Shift 2", in_time="08:00", out_time="23:00", reason="Stock count"),
        BulkRow(employee_id="E002", shift="Shift 1", in_time="22:00", out_time="2:00"),
    ]


def test_bulk_create_classifies_each_row(svc, repo, meta):
    created = svc.create_bulk(BulkCreateInput(work_date=MONDAY, rows=_rows()), actor_id="mgr", meta=meta)

    assert [r.record_id for r in created] == ["ot0001", "ot0002"]
    first, second = created
    assert first.status == OvertimeStatus.PENDING
    assert (first.normal_minutes, first.double_minutes, first.triple_minutes) == (750, 120, 0)
    assert first.reason == "Stock count"
    assert second.out_time == "02:00"
    assert second.double_minutes == 240 and second.is_night
    assert first.created_by == "mgr" and first.updated_by == "mgr"
    assert repo.get("ot0002") == second
    assert [a.action for a in repo.audit] == [AuditAction.CREATE, AuditAction.CREATE]
    assert repo.audit[0].meta == meta


def test_bulk_create_uses_calendar_for_triple_day(repo, clock, ids, meta):
    svc = OvertimeService(repo, StaticTripleDayCalendar([MONDAY]), clock=clock, id_factory=ids)
    (rec,) = svc.create_bulk(BulkCreateInput(work_date=MONDAY, rows=_rows()[:1]), actor_id="mgr", meta=meta)
    assert rec.is_triple_day is True
    assert (rec.normal_minutes, rec.double_minutes, rec.triple_minutes) == (0, 0, 900)


def test_bulk_create_explicit_flag_overrides_calendar(repo, clock, ids, meta):
    svc = OvertimeService(repo, StaticTripleDayCalendar([MONDAY]), clock=clock, id_factory=ids)
    data = BulkCreateInput(work_date=MONDAY, rows=_rows()[:1], is_triple_day=False)
    (rec,) = svc.create_bulk(data, actor_id="mgr", meta=meta)
    assert rec.triple_minutes == 0
    assert rec.normal_minutes == 750


def test_bulk_create_is_all_or_nothing(svc, repo, meta):
    rows = _rows() + [BulkRow(employee_id="E003", shift="Shift 2", in_time="08:00", out_time="99:99")]
    with pytest.raises(ValidationError) as exc:
        svc.create_bulk(BulkCreateInput(work_date=MONDAY, rows=rows), actor_id="mgr", meta=meta)

    assert "rows[2]" in str(exc.value)
    assert repo.create_calls == 0
    assert repo.count_by_status(OvertimeStatus.PENDING) == 0


def test_bulk_create_empty_rows_is_noop(svc, repo, meta):
    assert svc.create_bulk(BulkCreateInput(work_date=MONDAY, rows=[]), actor_id="mgr", meta=meta) == []
    assert repo.create_calls == 0


def test_update_recomputes_breakdown_when_times_change(svc, repo, meta):
    (rec,) = svc.create_bulk(BulkCreateInput(work_date=MONDAY, rows=_rows()[:1]), actor_id="mgr", meta=meta)

    updated = svc.update(rec.record_id, OvertimePatch(out_time="20:00"), actor_id="sup", meta=meta)

    assert updated.out_time == "20:00"
    assert (updated.normal_minutes, updated.double_minutes) == (690, 0)
    assert updated.is_night is False
    assert updated.updated_by == "sup"
    assert updated.created_by == "mgr"
    assert repo.get(rec.record_id) == updated
    assert repo.audit[-1].action == AuditAction.UPDATE


def test_update_shift_change_moves_threshold(svc, meta):
    (rec,) = svc.create_bulk(BulkCreateInput(work_date=MONDAY, rows=_rows()[:1]), actor_id="mgr", meta=meta)
    updated = svc.update(rec.record_id, OvertimePatch(shift="Shift 1"), actor_id="sup", meta=meta)
    # 08:00 is already past the 06:30 threshold, so OT starts at clock-in.
    assert updated.normal_minutes == 780


def test_update_reason_only_keeps_breakdown(svc, meta):
    (rec,) = svc.create_bulk(BulkCreateInput(work_date=MONDAY, rows=_rows()[:1]), actor_id="mgr", meta=meta)
    updated = svc.update(rec.record_id, OvertimePatch(reason="  Audit prep "), actor_id="sup", meta=meta)
    assert updated.reason == "Audit prep"
    assert updated.breakdown == rec.breakdown


def test_update_keeps_triple_day_flag(repo, clock, ids, meta):
    svc = OvertimeService(repo, StaticTripleDayCalendar([MONDAY]), clock=clock, id_factory=ids)
    (rec,) = svc.create_bulk(BulkCreateInput(work_date=MONDAY, rows=_rows()[:1]), actor_id="mgr", meta=meta)
    updated = svc.update(rec.record_id, OvertimePatch(in_time="10:00"), actor_id="sup", meta=meta)
    assert updated.triple_minutes == 13 * 60
    assert updated.normal_minutes == 0


def test_update_unknown_record(svc, meta):
    with pytest.raises(NotFoundError):
        svc.update("nope", OvertimePatch(reason="x"), actor_id="sup", meta=meta)


def test_update_decided_record_is_refused(svc, meta):
    (rec,) = svc.create_bulk(BulkCreateInput(work_date=MONDAY, rows=_rows()[:1]), actor_id="mgr", meta=meta)
    svc.approve(rec.record_id, DecisionInput(), actor_id="boss", meta=meta)
    with pytest.raises(InvalidStateTransition):
        svc.update(rec.record_id, OvertimePatch(reason="late edit"), actor_id="sup", meta=meta)


def test_update_lost_race_is_refused(svc, repo, meta):
    (rec,) = svc.create_bulk(BulkCreateInput(work_date=MONDAY, rows=_rows()[:1]), actor_id="mgr", meta=meta)

    original_update = repo.update_pending

    def decide_first(record, *, meta):
        repo.put(replace(repo.get(record.record_id), status=OvertimeStatus.REJECTED))
        return original_update(record, meta=meta)

    repo.update_pending = decide_first
    with pytest.raises(InvalidStateTransition):
        svc.update(rec.record_id, OvertimePatch(out_time="20:00"), actor_id="sup", meta=meta)
    assert repo.get(rec.record_id).out_time == "23:00"


def test_approve_then_reject_fails(svc, repo, meta):
    (rec,) = svc.create_bulk(BulkCreateInput(work_date=MONDAY, rows=_rows()[:1]), actor_id="mgr", meta=meta)

    approved = svc.approve(rec.record_id, DecisionInput(reason=" ok "), actor_id="boss", meta=meta)
    assert approved.status == OvertimeStatus.APPROVED
    assert approved.decided_by == "boss"
    assert approved.decision_reason == "ok"
    assert repo.get(rec.record_id).status == OvertimeStatus.APPROVED

    with pytest.raises(InvalidStateTransition):
        svc.reject(rec.record_id, DecisionInput(), actor_id="boss", meta=meta)
    with pytest.raises(InvalidStateTransition):
        svc.approve(rec.record_id, DecisionInput(), actor_id="boss", meta=meta)
    assert repo.get(rec.record_id).status == OvertimeStatus.APPROVED


def test_reject_pending(svc, repo, meta):
    (rec,) = svc.create_bulk(BulkCreateInput(work_date=MONDAY, rows=_rows()[:1]), actor_id="mgr", meta=meta)
    rejected = svc.reject(rec.record_id, DecisionInput(reason="Not planned"), actor_id="boss", meta=meta)
    assert rejected.status == OvertimeStatus.REJECTED
    assert repo.audit[-1].action == AuditAction.REJECT


def test_decision_on_unknown_record(svc, meta):
    with pytest.raises(NotFoundError):
        svc.approve("missing", DecisionInput(), actor_id="boss", meta=meta)
    with pytest.raises(NotFoundError):
        svc.reject("missing", DecisionInput(), actor_id="boss", meta=meta)


def test_concurrent_decision_only_one_wins(svc, repo, meta):
    (rec,) = svc.create_bulk(BulkCreateInput(work_date=MONDAY, rows=_rows()[:1]), actor_id="mgr", meta=meta)

    original_transition = repo.transition

    def other_request_wins(record_id, **kwargs):
        original_transition(record_id, **{**kwargs, "to_status": OvertimeStatus.REJECTED, "actor_id": "other"})
        return original_transition(record_id, **kwargs)

    repo.transition = other_request_wins
    with pytest.raises(InvalidStateTransition):
        svc.approve(rec.record_id, DecisionInput(), actor_id="boss", meta=meta)
    assert repo.get(rec.record_id).status == OvertimeStatus.REJECTED
    assert repo.get(rec.record_id).decided_by == "other"


def test_list_is_filtered_and_paginated(svc, meta):
    rows = [BulkRow(employee_id=f"E{i:03d}", shift="Shift 2", in_time="08:00", out_time="18:00") for i in range(5)]
    created = svc.create_bulk(BulkCreateInput(work_date=MONDAY, rows=rows), actor_id="mgr", meta=meta)
    svc.create_bulk(BulkCreateInput(work_date=date(2024, 6, 11), rows=rows[:1]), actor_id="mgr", meta=meta)

    page = svc.list(ListQuery(start=MONDAY, end=MONDAY, page=2, limit=2))
    assert page.total == 5
    assert [r.record_id for r in page.items] == [created[2].record_id, created[3].record_id]

    svc.approve(created[0].record_id, DecisionInput(), actor_id="boss", meta=meta)
    approved = svc.list(ListQuery(status=OvertimeStatus.APPROVED))
    assert [r.record_id for r in approved.items] == [created[0].record_id]

    by_employee = svc.list(ListQuery(employee_id="E000"))
    assert by_employee.total == 2


def test_list_rejects_inverted_range(svc):
    with pytest.raises(ValidationError):
        svc.list(ListQuery(start=date(2024, 6, 11), end=MONDAY))


def test_pending_count(svc, meta):
    created = svc.create_bulk(BulkCreateInput(work_date=MONDAY, rows=_rows()), actor_id="mgr", meta=meta)
    assert svc.pending_count() == 2
    svc.reject(created[0].record_id, DecisionInput(), actor_id="boss", meta=meta)
    assert svc.pending_count() == 1


def test_batch_keeps_row_order_with_random_ids(repo, meta):
    # default uuid ids and one shared created_at per batch
    svc = OvertimeService(repo, StaticTripleDayCalendar())
    rows = [BulkRow(employee_id=f"E{i:03d}", shift="Shift 2", in_time="08:00", out_time="18:00") for i in range(12)]
    svc.create_bulk(BulkCreateInput(work_date=MONDAY, rows=rows), actor_id="mgr", meta=meta)

    expected = [f"E{i:03d}" for i in range(12)]
    listed = svc.list(ListQuery(limit=100)).items
    assert [r.employee_id for r in listed] == expected

    newest = NotificationService(repo).pending(20)
    assert [r.employee_id for r in newest] == list(reversed(expected))
