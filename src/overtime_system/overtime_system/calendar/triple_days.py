from __future__ import annotations

from datetime import date
from typing import Iterable, Protocol

from ..common.datetime_utils import parse_iso_date


class TripleDayCalendar(Protocol):
    def is_triple_day(self, work_date: date) -> bool:
        raise NotImplementedError


class StaticTripleDayCalendar(TripleDayCalendar):
    """Triple days supplied from configuration; no holiday detection."""

    def __init__(self, days: Iterable[date] = ()):
        self._days = frozenset(days)

    @classmethod
    def from_setting(cls, value: str | Iterable[str] | None) -> "StaticTripleDayCalendar":
        if not value:
            return cls()
        items = value.split(",") if isinstance(value, str) else list(value)
        return cls(parse_iso_date(s) for s in items if s and s.strip())

    def is_triple_day(self, work_date: date) -> bool:
        return work_date in self._days
