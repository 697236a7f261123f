from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable

from ..core.constants import MAX_STATS_RANGE_DAYS
from ..core.enums import OvertimeStatus
from ..core.exceptions import ValidationError
from ..overtime.model import OvertimeRecord
from ..overtime.repository import OvertimeRepository


@dataclass(frozen=True)
class DayStats:
    date: date
    total: int = 0
    pending: int = 0
    approved: int = 0
    rejected: int = 0
    normal_minutes: int = 0
    double_minutes: int = 0
    triple_minutes: int = 0


def _aggregate(day: date, records: Iterable[OvertimeRecord]) -> DayStats:
    counts = {s: 0 for s in OvertimeStatus}
    normal = double = triple = 0
    total = 0
    for r in records:
        total += 1
        counts[r.status] += 1
        normal += r.normal_minutes
        double += r.double_minutes
        triple += r.triple_minutes
    return DayStats(
        date=day,
        total=total,
        pending=counts[OvertimeStatus.PENDING],
        approved=counts[OvertimeStatus.APPROVED],
        rejected=counts[OvertimeStatus.REJECTED],
        normal_minutes=normal,
        double_minutes=double,
        triple_minutes=triple,
    )


class OvertimeStatsService:
    def __init__(self, records: OvertimeRepository, *, max_range_days: int = MAX_STATS_RANGE_DAYS):
        self._records = records
        self._max_range_days = int(max_range_days)

    def day_stats(self, day: date) -> DayStats:
        return _aggregate(day, self._records.list_for_range(start=day, end=day))

    def range_stats(self, start: date, end: date) -> list[DayStats]:
        """One DayStats per calendar date in [start, end], ascending; empty days are zeros."""

        if end < start:
            raise ValidationError("'to' must be on or after 'from'")
        days = (end - start).days + 1
        if days > self._max_range_days:
            raise ValidationError(f"Date range too long (max {self._max_range_days} days)")

        by_day: dict[date, list[OvertimeRecord]] = {}
        for r in self._records.list_for_range(start=start, end=end):
            by_day.setdefault(r.work_date, []).append(r)

        out: list[DayStats] = []
        for i in range(days):
            d = start + timedelta(days=i)
            out.append(_aggregate(d, by_day.get(d, ())))
        return out
