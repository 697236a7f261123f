from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import DayType
from .strategies.base import OvertimeStrategy
from .strategies.triple_day_strategy import TripleDayStrategy
from .strategies.weekday_strategy import WeekdayStrategy
from .strategies.weekend_strategy import WeekendStrategy


@dataclass
class OvertimeStrategyFactory:
    """Factory Pattern: choose the pay-tier strategy for a work date."""

    def for_day(self, *, day_type: DayType, is_triple_day: bool) -> OvertimeStrategy:
        if is_triple_day:
            return TripleDayStrategy()
        if day_type in (DayType.SATURDAY, DayType.SUNDAY):
            return WeekendStrategy()
        return WeekdayStrategy()
