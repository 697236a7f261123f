from __future__ import annotations

from enum import Enum


class OvertimeStatus(str, Enum):
    """Lifecycle state of an overtime record."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class DayType(str, Enum):
    """Calendar classification driving the pay tier rules."""

    WEEKDAY = "WEEKDAY"
    SATURDAY = "SATURDAY"
    SUNDAY = "SUNDAY"


class AuditAction(str, Enum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    APPROVE = "APPROVE"
    REJECT = "REJECT"
