from __future__ import annotations

from .base import OvertimeStrategy, ShiftSpan, TierMinutes


class WeekendStrategy(OvertimeStrategy):
    """Saturday/Sunday: every OT-eligible minute is double."""

    def allocate(self, span: ShiftSpan) -> TierMinutes:
        return TierMinutes(double=span.ot_span)
