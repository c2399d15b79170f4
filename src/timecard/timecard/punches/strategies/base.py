from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class TimeInDecision:
    time_in: datetime
    note: Optional[str] = None


class ClockInStrategy(ABC):
    """Strategy Pattern: decide which instant a clock-in is recorded at."""

    @abstractmethod
    def decide_time_in(self, *, now: datetime, scheduled_start: Optional[datetime]) -> TimeInDecision:
        raise NotImplementedError
