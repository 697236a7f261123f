from __future__ import annotations

from .base import OvertimeStrategy, ShiftSpan, TierMinutes


class TripleDayStrategy(OvertimeStrategy):
    """Designated triple day: the whole shift is paid triple, threshold ignored."""

    def allocate(self, span: ShiftSpan) -> TierMinutes:
        return TierMinutes(triple=max(0, span.total))
