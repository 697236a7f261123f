from __future__ import annotations

from ...core.constants import NIGHT_CUTOFF_MINUTES
from .base import OvertimeStrategy, ShiftSpan, TierMinutes


class WeekdayStrategy(OvertimeStrategy):
    """Weekday: normal until the night cutoff, double from the cutoff on."""

    def __init__(self, night_cutoff: int = NIGHT_CUTOFF_MINUTES):
        self._cutoff = int(night_cutoff)

    def allocate(self, span: ShiftSpan) -> TierMinutes:
        start = span.ot_start
        normal = max(0, min(span.end, self._cutoff) - start)
        double = max(0, span.end - max(start, self._cutoff))
        return TierMinutes(normal=normal, double=double)
