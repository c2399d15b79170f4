from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timedelta

from ...common.datetime_utils import round_hours
from ...punches.model import Punch


class HoursCalculator(ABC):
    """Calculator interface (Strategy Pattern for elapsed time)."""

    @abstractmethod
    def elapsed(self, punch: Punch, *, now: datetime) -> timedelta:
        raise NotImplementedError

    def paid_hours(self, punch: Punch, *, now: datetime) -> float:
        return round_hours(self.elapsed(punch, now=now))
