from __future__ import annotations

from datetime import datetime, timedelta

from ...punches.model import Punch
from .base import HoursCalculator


class StandardHoursCalculator(HoursCalculator):
    """Standard rule: (time_out or now) - time_in, not below 0."""

    def elapsed(self, punch: Punch, *, now: datetime) -> timedelta:
        end = punch.time_out if punch.time_out is not None else now
        return max(end - punch.time_in, timedelta(0))
