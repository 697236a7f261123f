from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class ShiftSpan:
    """Clock-in/out expressed in minutes since midnight of the work date.

    `end` is already wrap-adjusted: an overnight shift ends after 1440.
    """

    start: int
    end: int
    ot_threshold: int

    @property
    def total(self) -> int:
        return self.end - self.start

    @property
    def ot_start(self) -> int:
        return max(self.start, self.ot_threshold)

    @property
    def ot_span(self) -> int:
        return max(0, self.end - self.ot_start)


@dataclass(frozen=True)
class TierMinutes:
    normal: int = 0
    double: int = 0
    triple: int = 0


class OvertimeStrategy(ABC):
    """Strategy Pattern: encapsulate how a shift's minutes are split into pay tiers."""

    @abstractmethod
    def allocate(self, span: ShiftSpan) -> TierMinutes:
        raise NotImplementedError
