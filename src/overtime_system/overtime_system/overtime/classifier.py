from __future__ import annotations

from datetime import date
from typing import Optional

from ..common.datetime_utils import parse_hhmm
from ..core.constants import DEFAULT_OT_START, FIRST_SHIFT_OT_START, MINUTES_PER_DAY, NIGHT_CUTOFF_MINUTES
from ..core.enums import DayType
from .factory import OvertimeStrategyFactory
from .model import MinutesBreakdown
from .strategies.base import ShiftSpan

_factory = OvertimeStrategyFactory()


def day_type_of(work_date: date) -> DayType:
    weekday = work_date.weekday()
    if weekday == 6:
        return DayType.SUNDAY
    if weekday == 5:
        return DayType.SATURDAY
    return DayType.WEEKDAY


def ot_threshold_for(shift: str) -> int:
    """First-shift rosters start overtime at 06:30, everything else at 08:30."""
    if "1" in (shift or "").lower():
        return parse_hhmm(FIRST_SHIFT_OT_START)
    return parse_hhmm(DEFAULT_OT_START)


def classify(
    work_date: date,
    shift: str,
    in_time: str,
    out_time: str,
    is_triple_day: bool,
    *,
    factory: Optional[OvertimeStrategyFactory] = None,
) -> MinutesBreakdown:
    """Split a shift into normal/double/triple minutes and flag night work.

    `out_time` earlier than `in_time` means the shift ends on the next day.
    Pure: identical inputs always give identical output.
    """

    start = parse_hhmm(in_time)
    end = parse_hhmm(out_time)
    if end < start:
        end += MINUTES_PER_DAY

    span = ShiftSpan(start=start, end=end, ot_threshold=ot_threshold_for(shift))
    strategy = (factory or _factory).for_day(day_type=day_type_of(work_date), is_triple_day=bool(is_triple_day))
    tiers = strategy.allocate(span)

    return MinutesBreakdown(
        normal_minutes=tiers.normal,
        double_minutes=tiers.double,
        triple_minutes=tiers.triple,
        is_night=end >= NIGHT_CUTOFF_MINUTES,
    )
