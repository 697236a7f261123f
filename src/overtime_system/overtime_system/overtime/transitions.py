from __future__ import annotations

from ..core.enums import OvertimeStatus
from ..core.exceptions import InvalidStateTransition

ALLOWED_TRANSITIONS: dict[OvertimeStatus, frozenset[OvertimeStatus]] = {
    OvertimeStatus.PENDING: frozenset({OvertimeStatus.APPROVED, OvertimeStatus.REJECTED}),
    OvertimeStatus.APPROVED: frozenset(),
    OvertimeStatus.REJECTED: frozenset(),
}


def can_transition(current: OvertimeStatus, target: OvertimeStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def ensure_transition(current: OvertimeStatus, target: OvertimeStatus) -> None:
    if not can_transition(current, target):
        raise InvalidStateTransition(f"Cannot move overtime record from {current.value} to {target.value}")


def is_editable(status: OvertimeStatus) -> bool:
    """Only undecided records accept patches."""
    return status == OvertimeStatus.PENDING
