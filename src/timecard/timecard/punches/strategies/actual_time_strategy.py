from __future__ import annotations

from datetime import datetime
from typing import Optional

from .base import ClockInStrategy, TimeInDecision


class ActualTimeStrategy(ClockInStrategy):
    """Record the moment the worker actually clocked in."""

    def decide_time_in(self, *, now: datetime, scheduled_start: Optional[datetime]) -> TimeInDecision:
        return TimeInDecision(time_in=now)
