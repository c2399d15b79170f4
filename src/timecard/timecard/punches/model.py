from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Mapping, Optional, Tuple

from ..common.datetime_utils import ensure_utc, parse_iso_utc, to_iso_utc
from ..core.enums import PingOutcome, PunchState, PunchStatus
from ..core.exceptions import ValidationError, ValidationFailed


def _require_aware(value: datetime, field_name: str) -> datetime:
    if not isinstance(value, datetime):
        raise ValidationError(f"{field_name} must be a datetime")
    if value.tzinfo is None:
        raise ValidationError(f"{field_name} must be timezone-aware")
    return ensure_utc(value)


@dataclass(frozen=True)
class LocationSample:
    """One position report. ``within_geofence`` None means undetermined."""

    latitude: float
    longitude: float
    recorded_at: datetime
    accuracy: Optional[float] = None
    within_geofence: Optional[bool] = None
    distance_meters: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "LocationSample":
        within = data.get("within_geofence")
        return cls(
            latitude=float(data["latitude"]),
            longitude=float(data["longitude"]),
            recorded_at=parse_iso_utc(data["recorded_at"]),
            accuracy=float(data["accuracy"]) if data.get("accuracy") is not None else None,
            within_geofence=None if within is None else bool(within),
            distance_meters=float(data["distance_meters"]) if data.get("distance_meters") is not None else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "accuracy": self.accuracy,
            "within_geofence": self.within_geofence,
            "distance_meters": self.distance_meters,
            "recorded_at": to_iso_utc(self.recorded_at),
        }


@dataclass(frozen=True)
class Punch:
    """A worker's single clock-in/clock-out record against a job."""

    punch_id: str
    worker_id: str
    applicant_id: str
    job_id: str
    time_in: datetime
    time_out: Optional[datetime] = None
    shift_slug: Optional[str] = None
    location_samples: Tuple[LocationSample, ...] = ()
    status: PunchStatus = PunchStatus.PENDING
    user_note: Optional[str] = None
    manager_note: Optional[str] = None
    approving_manager_id: Optional[str] = None
    paid_hours: Optional[float] = None
    modified_at: Optional[datetime] = None
    modified_by: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "time_in", _require_aware(self.time_in, "time_in"))
        if self.time_out is not None:
            object.__setattr__(self, "time_out", _require_aware(self.time_out, "time_out"))
            if self.time_out <= self.time_in:
                raise ValidationFailed("time_out must be after time_in")
        if self.modified_at is not None:
            object.__setattr__(self, "modified_at", _require_aware(self.modified_at, "modified_at"))

        object.__setattr__(self, "status", PunchStatus(self.status))
        object.__setattr__(self, "location_samples", tuple(self.location_samples))

        if self.status in (PunchStatus.APPROVED, PunchStatus.REJECTED) and not self.approving_manager_id:
            raise ValidationError(f"{self.status.value} punch requires approving_manager_id")
        if self.paid_hours is not None and self.status != PunchStatus.APPROVED:
            raise ValidationError("paid_hours is only set on approved punches")

    @property
    def is_open(self) -> bool:
        return self.status == PunchStatus.PENDING and self.time_out is None

    @property
    def state(self) -> PunchState:
        if self.status == PunchStatus.APPROVED:
            return PunchState.APPROVED
        if self.status == PunchStatus.REJECTED:
            return PunchState.REJECTED
        if self.status == PunchStatus.CANCELLED:
            return PunchState.CANCELLED
        return PunchState.OPEN if self.time_out is None else PunchState.CLOSED

    @property
    def has_geofence_violation(self) -> bool:
        return any(s.within_geofence is False for s in self.location_samples)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Punch":
        paid = data.get("paid_hours")
        return cls(
            punch_id=str(data.get("punch_id") or ""),
            worker_id=str(data["worker_id"]),
            applicant_id=str(data["applicant_id"]),
            job_id=str(data["job_id"]),
            time_in=parse_iso_utc(data["time_in"]),
            time_out=parse_iso_utc(data.get("time_out")),
            shift_slug=data.get("shift_slug"),
            location_samples=tuple(LocationSample.from_dict(s) for s in data.get("location_samples") or ()),
            status=PunchStatus(data.get("status") or PunchStatus.PENDING.value),
            user_note=data.get("user_note"),
            manager_note=data.get("manager_note"),
            approving_manager_id=data.get("approving_manager_id"),
            paid_hours=float(paid) if paid is not None else None,
            modified_at=parse_iso_utc(data.get("modified_at")),
            modified_by=data.get("modified_by"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "punch_id": self.punch_id,
            "worker_id": self.worker_id,
            "applicant_id": self.applicant_id,
            "job_id": self.job_id,
            "shift_slug": self.shift_slug,
            "time_in": to_iso_utc(self.time_in),
            "time_out": to_iso_utc(self.time_out),
            "location_samples": [s.to_dict() for s in self.location_samples],
            "status": self.status.value,
            "state": self.state.value,
            "user_note": self.user_note,
            "manager_note": self.manager_note,
            "approving_manager_id": self.approving_manager_id,
            "paid_hours": self.paid_hours,
            "modified_at": to_iso_utc(self.modified_at),
            "modified_by": self.modified_by,
        }


@dataclass(frozen=True)
class LocationPingResult:
    outcome: PingOutcome
    punch: Punch
    sample: Optional[LocationSample] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "outcome": self.outcome.value,
            "sample": self.sample.to_dict() if self.sample else None,
            "punch": self.punch.to_dict(),
        }
