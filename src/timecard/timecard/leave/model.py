from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, Mapping

from ..common.datetime_utils import ensure_utc, parse_iso_utc, to_iso_utc
from ..core.enums import PunchStatus
from ..core.exceptions import ValidationFailed


@dataclass(frozen=True)
class LeaveRequest:
    """Approved or requested time off. Read-only here; owned by the leave workflow."""

    leave_id: str
    worker_id: str
    applicant_id: str
    start: datetime
    end: datetime
    leave_request_type: str
    pto_hours: float = 0.0
    company_hours: float = 0.0
    status: PunchStatus = PunchStatus.PENDING

    def __post_init__(self) -> None:
        object.__setattr__(self, "start", ensure_utc(self.start))
        object.__setattr__(self, "end", ensure_utc(self.end))
        object.__setattr__(self, "status", PunchStatus(self.status))
        if self.end < self.start:
            raise ValidationFailed(f"Leave {self.leave_id} ends before it starts")

    @property
    def counts_toward_hours(self) -> bool:
        return self.status not in (PunchStatus.REJECTED, PunchStatus.CANCELLED)

    @property
    def total_hours(self) -> timedelta:
        return timedelta(hours=float(self.pto_hours or 0) + float(self.company_hours or 0))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "LeaveRequest":
        return cls(
            leave_id=str(data["leave_id"]),
            worker_id=str(data["worker_id"]),
            applicant_id=str(data.get("applicant_id") or data["worker_id"]),
            start=parse_iso_utc(data["start"]),
            end=parse_iso_utc(data["end"]),
            leave_request_type=str(data.get("leave_request_type") or "PTO"),
            pto_hours=float(data.get("pto_hours") or 0),
            company_hours=float(data.get("company_hours") or 0),
            status=PunchStatus(data.get("status") or PunchStatus.PENDING.value),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "leave_id": self.leave_id,
            "worker_id": self.worker_id,
            "applicant_id": self.applicant_id,
            "start": to_iso_utc(self.start),
            "end": to_iso_utc(self.end),
            "leave_request_type": self.leave_request_type,
            "pto_hours": self.pto_hours,
            "company_hours": self.company_hours,
            "status": self.status.value,
        }
