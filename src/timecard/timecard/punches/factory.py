from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from ..jobs.model import AdditionalConfig
from .strategies.actual_time_strategy import ActualTimeStrategy
from .strategies.base import ClockInStrategy
from .strategies.snap_to_shift_start_strategy import SnapToShiftStartStrategy


@dataclass
class ClockInStrategyFactory:
    """Factory Pattern: choose the clock-in time policy from job settings."""

    def for_clock_in(
        self,
        *,
        now: datetime,
        scheduled_start: Optional[datetime],
        config: AdditionalConfig,
    ) -> ClockInStrategy:
        if not config.auto_adjust_early_clock_in or scheduled_start is None:
            return ActualTimeStrategy()

        earliest = scheduled_start - timedelta(minutes=int(config.early_clock_in_minutes or 0))
        if earliest <= now < scheduled_start:
            return SnapToShiftStartStrategy()
        return ActualTimeStrategy()
