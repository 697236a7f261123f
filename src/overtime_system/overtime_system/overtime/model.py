from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import AuditAction, OvertimeStatus


@dataclass(frozen=True)
class MinutesBreakdown:
    """Result of classifying one shift into pay tiers."""

    normal_minutes: int
    double_minutes: int
    triple_minutes: int
    is_night: bool


@dataclass(frozen=True)
class OvertimeRecord:
    """Domain entity: one employee's overtime on one work date."""

    record_id: str
    employee_id: str
    work_date: date
    shift: str
    in_time: str
    out_time: str
    reason: Optional[str]
    status: OvertimeStatus
    normal_minutes: int
    double_minutes: int
    triple_minutes: int
    is_night: bool
    is_triple_day: bool
    created_by: str
    updated_by: str
    created_at: datetime
    updated_at: datetime
    decided_by: Optional[str] = None
    decided_at: Optional[datetime] = None
    decision_reason: Optional[str] = None

    @property
    def breakdown(self) -> MinutesBreakdown:
        return MinutesBreakdown(
            normal_minutes=self.normal_minutes,
            double_minutes=self.double_minutes,
            triple_minutes=self.triple_minutes,
            is_night=self.is_night,
        )


@dataclass(frozen=True)
class AuditMeta:
    """Request metadata stored with every mutating action (audit only)."""

    ip: Optional[str] = None
    user_agent: Optional[str] = None
    route: Optional[str] = None

    def as_dict(self) -> dict:
        return {"ip": self.ip, "userAgent": self.user_agent, "route": self.route}


@dataclass(frozen=True)
class OvertimeAuditEntry:
    record_id: str
    action: AuditAction
    actor_id: str
    meta: AuditMeta
    created_at: datetime


# ---- Typed operation inputs (built by overtime.schemas) ----


@dataclass(frozen=True)
class BulkRow:
    employee_id: str
    shift: str
    in_time: str
    out_time: str
    reason: Optional[str] = None


@dataclass(frozen=True)
class BulkCreateInput:
    work_date: date
    rows: Sequence[BulkRow]
    # None: ask the triple-day calendar.
    is_triple_day: Optional[bool] = None


@dataclass(frozen=True)
class OvertimePatch:
    shift: Optional[str] = None
    in_time: Optional[str] = None
    out_time: Optional[str] = None
    reason: Optional[str] = None

    def is_empty(self) -> bool:
        return self.shift is None and self.in_time is None and self.out_time is None and self.reason is None


@dataclass(frozen=True)
class DecisionInput:
    reason: Optional[str] = None


@dataclass(frozen=True)
class ListQuery:
    start: Optional[date] = None
    end: Optional[date] = None
    status: Optional[OvertimeStatus] = None
    employee_id: Optional[str] = None
    page: int = 1
    limit: int = 20

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True)
class Page:
    items: list[OvertimeRecord] = field(default_factory=list)
    page: int = 1
    limit: int = 20
    total: int = 0
