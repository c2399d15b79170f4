from __future__ import annotations

from datetime import datetime
from typing import Protocol, Sequence

from .model import LeaveRequest


class LeaveRepository(Protocol):
    def find_leave_requests(self, worker_id: str, start: datetime, end: datetime) -> Sequence[LeaveRequest]:
        """Leave requests of the worker whose span intersects ``[start, end)``."""

        raise NotImplementedError
