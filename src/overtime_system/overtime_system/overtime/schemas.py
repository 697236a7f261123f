"""Boundary validation: raw JSON/query dicts -> typed operation inputs.

Controllers call these before touching a service so the core only ever sees
well-formed dataclasses.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from ..common.datetime_utils import parse_hhmm, parse_iso_date
from ..common.validators import optional_str, parse_int, require_min_length, require_non_empty
from ..core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from ..core.enums import OvertimeStatus
from ..core.exceptions import ValidationError
from .model import BulkCreateInput, BulkRow, DecisionInput, ListQuery, OvertimePatch


def _require_mapping(value: Any, field_name: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ValidationError(f"{field_name} must be an object")
    return value


def _time_field(value: Any, field_name: str) -> str:
    value = require_min_length(value, field_name, 4)
    parse_hhmm(value)
    return value.strip()


def _date_field(value: Any, field_name: str):
    return parse_iso_date(require_min_length(value, field_name, 10))


def _optional_bool(value: Any, field_name: str) -> Optional[bool]:
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    raise ValidationError(f"{field_name} must be a boolean")


def parse_record_id(value: Any) -> str:
    return require_non_empty(value if isinstance(value, str) else None, "id")


def parse_bulk_create(body: Any) -> BulkCreateInput:
    body = _require_mapping(body, "body")
    work_date = _date_field(body.get("workDate"), "workDate")

    raw_rows = body.get("rows")
    if not isinstance(raw_rows, list):
        raise ValidationError("rows must be a list")

    rows: list[BulkRow] = []
    for idx, raw in enumerate(raw_rows):
        try:
            raw = _require_mapping(raw, "row")
            rows.append(
                BulkRow(
                    employee_id=require_non_empty(raw.get("employeeId"), "employeeId"),
                    shift=require_non_empty(raw.get("shift"), "shift"),
                    in_time=_time_field(raw.get("inTime"), "inTime"),
                    out_time=_time_field(raw.get("outTime"), "outTime"),
                    reason=optional_str(raw.get("reason"), "reason"),
                )
            )
        except ValidationError as e:
            raise ValidationError(f"rows[{idx}]: {e}") from e

    return BulkCreateInput(
        work_date=work_date,
        rows=rows,
        is_triple_day=_optional_bool(body.get("isTripleDay"), "isTripleDay"),
    )


def parse_patch(body: Any) -> OvertimePatch:
    body = _require_mapping(body if body is not None else {}, "body")

    shift = optional_str(body.get("shift"), "shift")
    if shift is not None:
        shift = require_non_empty(shift, "shift")
    in_time = body.get("inTime")
    out_time = body.get("outTime")

    return OvertimePatch(
        shift=shift,
        in_time=_time_field(in_time, "inTime") if in_time is not None else None,
        out_time=_time_field(out_time, "outTime") if out_time is not None else None,
        reason=optional_str(body.get("reason"), "reason"),
    )


def parse_decision(body: Any) -> DecisionInput:
    body = _require_mapping(body if body is not None else {}, "body")
    return DecisionInput(reason=optional_str(body.get("reason"), "reason"))


def parse_status(value: Optional[str]) -> Optional[OvertimeStatus]:
    if not value:
        return None
    try:
        return OvertimeStatus(value.strip().upper())
    except ValueError:
        allowed = ", ".join(s.value for s in OvertimeStatus)
        raise ValidationError(f"status must be one of {allowed}")


def parse_list_query(args: Mapping[str, Any]) -> ListQuery:
    start = args.get("from")
    end = args.get("to")
    employee_id = (args.get("employeeId") or "").strip() or None
    return ListQuery(
        start=parse_iso_date(start) if start else None,
        end=parse_iso_date(end) if end else None,
        status=parse_status(args.get("status")),
        employee_id=employee_id,
        page=parse_int(args.get("page"), "page", default=1),
        limit=parse_int(args.get("limit"), "limit", default=DEFAULT_PAGE_SIZE, maximum=MAX_PAGE_SIZE),
    )


def parse_notification_limit(args: Mapping[str, Any]) -> Optional[int]:
    raw = args.get("limit")
    if raw is None or raw == "":
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ValidationError("limit must be an integer")


def parse_day(args: Mapping[str, Any]):
    return _date_field(args.get("date"), "date")


def parse_range(args: Mapping[str, Any]):
    return _date_field(args.get("from"), "from"), _date_field(args.get("to"), "to")
