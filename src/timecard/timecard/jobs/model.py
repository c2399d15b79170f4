from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Any, Dict, Mapping, Optional, Tuple

from ..common.datetime_utils import ensure_utc, parse_clock_time, parse_iso_date, parse_iso_utc, to_iso_utc
from ..core.constants import DEFAULT_TIMEZONE, WEEKDAY_NAMES
from ..core.exceptions import ValidationError, ValidationFailed


def _optional_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Expected a number, got {value!r}")


@dataclass(frozen=True)
class JobLocation:
    """Where a job takes place. Radius plus grace distance is the allowed distance in meters."""

    latitude: Optional[float] = None
    longitude: Optional[float] = None
    geo_fence_radius: Optional[float] = None
    grace_distance_feet: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> Optional["JobLocation"]:
        if not data:
            return None
        return cls(
            latitude=_optional_float(data.get("latitude")),
            longitude=_optional_float(data.get("longitude")),
            geo_fence_radius=_optional_float(data.get("geo_fence_radius")),
            grace_distance_feet=_optional_float(data.get("grace_distance_feet")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "geo_fence_radius": self.geo_fence_radius,
            "grace_distance_feet": self.grace_distance_feet,
        }


@dataclass(frozen=True)
class AdditionalConfig:
    geofence: bool = False
    auto_clockout_shift_end: bool = False
    early_clock_in_minutes: int = 0
    auto_adjust_early_clock_in: bool = False
    allow_breaks: bool = True
    allow_overtime: bool = True
    allow_manual_punches: bool = True

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "AdditionalConfig":
        data = data or {}
        defaults = cls()
        return cls(
            geofence=bool(data.get("geofence", defaults.geofence)),
            auto_clockout_shift_end=bool(data.get("auto_clockout_shift_end", defaults.auto_clockout_shift_end)),
            early_clock_in_minutes=int(data.get("early_clock_in_minutes") or 0),
            auto_adjust_early_clock_in=bool(data.get("auto_adjust_early_clock_in", defaults.auto_adjust_early_clock_in)),
            allow_breaks=bool(data.get("allow_breaks", defaults.allow_breaks)),
            allow_overtime=bool(data.get("allow_overtime", defaults.allow_overtime)),
            allow_manual_punches=bool(data.get("allow_manual_punches", defaults.allow_manual_punches)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "geofence": self.geofence,
            "auto_clockout_shift_end": self.auto_clockout_shift_end,
            "early_clock_in_minutes": self.early_clock_in_minutes,
            "auto_adjust_early_clock_in": self.auto_adjust_early_clock_in,
            "allow_breaks": self.allow_breaks,
            "allow_overtime": self.allow_overtime,
            "allow_manual_punches": self.allow_manual_punches,
        }

    @property
    def tracks_location(self) -> bool:
        return self.geofence or self.auto_clockout_shift_end


@dataclass(frozen=True)
class RosterEntry:
    employee_id: str
    on_date: Optional[date] = None
    status: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RosterEntry":
        raw_date = data.get("date")
        return cls(
            employee_id=str(data["employee_id"]),
            on_date=parse_iso_date(raw_date) if raw_date else None,
            status=data.get("status"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "employee_id": self.employee_id,
            "date": self.on_date.isoformat() if self.on_date else None,
            "status": self.status,
        }


@dataclass(frozen=True)
class ScheduleEntry:
    """Scheduled hours for one weekday. ``end`` at or before ``start`` runs past midnight."""

    start: time
    end: time
    roster: Tuple[RosterEntry, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ScheduleEntry":
        return cls(
            start=parse_clock_time(data["start"]),
            end=parse_clock_time(data["end"]),
            roster=tuple(RosterEntry.from_dict(r) for r in data.get("roster") or ()),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start": self.start.strftime("%H:%M"),
            "end": self.end.strftime("%H:%M"),
            "roster": [r.to_dict() for r in self.roster],
        }


@dataclass(frozen=True)
class Shift:
    slug: str
    shift_name: str
    shift_start_date: datetime
    shift_end_date: datetime
    default_schedule: Mapping[str, ScheduleEntry] = field(default_factory=dict)
    shift_roster: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.slug:
            raise ValidationError("Shift slug is required")
        object.__setattr__(self, "shift_start_date", ensure_utc(self.shift_start_date))
        object.__setattr__(self, "shift_end_date", ensure_utc(self.shift_end_date))
        if self.shift_start_date >= self.shift_end_date:
            raise ValidationFailed(f"Shift {self.slug!r} must start before it ends")
        unknown = set(self.default_schedule) - set(WEEKDAY_NAMES)
        if unknown:
            raise ValidationError(f"Unknown weekday(s) in schedule: {', '.join(sorted(unknown))}")

    def contains(self, moment: datetime) -> bool:
        """Inclusive on both ends."""
        return self.shift_start_date <= moment <= self.shift_end_date

    def schedule_for(self, weekday_name: str) -> Optional[ScheduleEntry]:
        return self.default_schedule.get(weekday_name)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Shift":
        schedule = data.get("default_schedule") or {}
        return cls(
            slug=str(data["slug"]),
            shift_name=str(data.get("shift_name") or data["slug"]),
            shift_start_date=_require_timestamp(data.get("shift_start_date"), "shift_start_date"),
            shift_end_date=_require_timestamp(data.get("shift_end_date"), "shift_end_date"),
            default_schedule={day: ScheduleEntry.from_dict(entry) for day, entry in schedule.items() if entry},
            shift_roster=tuple(str(x) for x in data.get("shift_roster") or ()),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "slug": self.slug,
            "shift_name": self.shift_name,
            "shift_start_date": to_iso_utc(self.shift_start_date),
            "shift_end_date": to_iso_utc(self.shift_end_date),
            "default_schedule": {day: entry.to_dict() for day, entry in self.default_schedule.items()},
            "shift_roster": list(self.shift_roster),
        }


@dataclass(frozen=True)
class Job:
    job_id: str
    title: str
    location: Optional[JobLocation] = None
    venue_location: Optional[JobLocation] = None
    timezone: str = DEFAULT_TIMEZONE
    additional_config: AdditionalConfig = field(default_factory=AdditionalConfig)
    shifts: Tuple[Shift, ...] = ()

    def shift_by_slug(self, slug: Optional[str]) -> Optional[Shift]:
        if not slug:
            return None
        for shift in self.shifts:
            if shift.slug == slug:
                return shift
        return None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], *, default_timezone: str = DEFAULT_TIMEZONE) -> "Job":
        return cls(
            job_id=str(data["job_id"]),
            title=str(data.get("title") or ""),
            location=JobLocation.from_dict(data.get("location")),
            venue_location=JobLocation.from_dict(data.get("venue_location")),
            timezone=data.get("timezone") or default_timezone,
            additional_config=AdditionalConfig.from_dict(data.get("additional_config")),
            shifts=tuple(Shift.from_dict(s) for s in data.get("shifts") or ()),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "job_id": self.job_id,
            "title": self.title,
            "location": self.location.to_dict() if self.location else None,
            "venue_location": self.venue_location.to_dict() if self.venue_location else None,
            "timezone": self.timezone,
            "additional_config": self.additional_config.to_dict(),
            "shifts": [s.to_dict() for s in self.shifts],
        }


def _require_timestamp(value: Any, field_name: str) -> datetime:
    if isinstance(value, datetime):
        return ensure_utc(value)
    parsed = parse_iso_utc(value)
    if parsed is None:
        raise ValidationError(f"{field_name} is required")
    return parsed
