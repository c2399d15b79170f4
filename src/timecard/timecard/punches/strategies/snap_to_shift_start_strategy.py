from __future__ import annotations

from datetime import datetime
from typing import Optional

from .base import ClockInStrategy, TimeInDecision


class SnapToShiftStartStrategy(ClockInStrategy):
    """Early clock-in inside the allowed window counts from the scheduled start."""

    def decide_time_in(self, *, now: datetime, scheduled_start: Optional[datetime]) -> TimeInDecision:
        if scheduled_start is None:
            return TimeInDecision(time_in=now)
        return TimeInDecision(
            time_in=scheduled_start,
            note=f"Early clock-in adjusted to scheduled start {scheduled_start:%H:%M} UTC",
        )
