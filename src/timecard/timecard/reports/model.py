from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Dict, Optional, Tuple

from ..common.datetime_utils import DateWindow, round_hours, to_iso_utc
from ..core.enums import DetailKind


@dataclass(frozen=True)
class DayDetail:
    kind: DetailKind
    duration: timedelta
    punch_id: Optional[str] = None
    job_id: Optional[str] = None
    shift_name: Optional[str] = None
    time_in: Optional[datetime] = None
    time_out: Optional[datetime] = None
    leave_id: Optional[str] = None
    leave_request_type: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"kind": self.kind.value, "hours": round_hours(self.duration)}
        if self.kind == DetailKind.PUNCH:
            data.update(
                punch_id=self.punch_id,
                job_id=self.job_id,
                shift_name=self.shift_name,
                time_in=to_iso_utc(self.time_in),
                time_out=to_iso_utc(self.time_out),
            )
        else:
            data.update(leave_id=self.leave_id, leave_request_type=self.leave_request_type)
        return data


@dataclass(frozen=True)
class DayBucket:
    day: date
    day_name: str
    punch_duration: timedelta
    leave_duration: timedelta
    details: Tuple[DayDetail, ...] = ()

    @property
    def duration(self) -> timedelta:
        return self.punch_duration + self.leave_duration

    @property
    def multiple_entries(self) -> bool:
        return len(self.details) > 1

    @property
    def hours(self) -> float:
        return round_hours(self.duration)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.day.isoformat(),
            "day_name": self.day_name,
            "hours": self.hours,
            "punch_hours": round_hours(self.punch_duration),
            "leave_hours": round_hours(self.leave_duration),
            "multiple_entries": self.multiple_entries,
            "details": [d.to_dict() for d in self.details],
        }


@dataclass(frozen=True)
class WeekBucket:
    """Days of one week that fall inside the report window."""

    week_start: date
    duration: timedelta
    days: Tuple[date, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "week_start": self.week_start.isoformat(),
            "hours": round_hours(self.duration),
            "days": [d.isoformat() for d in self.days],
        }


@dataclass(frozen=True)
class MonthBucket:
    year: int
    month: int
    duration: timedelta

    def to_dict(self) -> Dict[str, Any]:
        return {"month": f"{self.year:04d}-{self.month:02d}", "hours": round_hours(self.duration)}


@dataclass(frozen=True)
class Anomalies:
    overlaps: Tuple[Tuple[str, str], ...] = ()
    open_punch_ids: Tuple[str, ...] = ()
    missing_clock_out_ids: Tuple[str, ...] = ()
    off_roster_ids: Tuple[str, ...] = ()
    geofence_violation_ids: Tuple[str, ...] = ()
    duplicate_days: Tuple[date, ...] = ()
    gap_days: Tuple[date, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "overlaps": [list(pair) for pair in self.overlaps],
            "open_punches": list(self.open_punch_ids),
            "missing_clock_outs": list(self.missing_clock_out_ids),
            "off_roster": list(self.off_roster_ids),
            "geofence_violations": list(self.geofence_violation_ids),
            "duplicate_days": [d.isoformat() for d in self.duplicate_days],
            "gap_days": [d.isoformat() for d in self.gap_days],
        }


@dataclass(frozen=True)
class TimesheetReport:
    window: DateWindow
    timezone: str
    week_start_day: int
    days: Tuple[DayBucket, ...]
    weeks: Tuple[WeekBucket, ...]
    months: Tuple[MonthBucket, ...]
    anomalies: Anomalies
    worker_id: Optional[str] = None

    @property
    def total(self) -> timedelta:
        return sum((d.duration for d in self.days), timedelta(0))

    @property
    def leave_total(self) -> timedelta:
        return sum((d.leave_duration for d in self.days), timedelta(0))

    def day(self, on: date) -> DayBucket:
        for bucket in self.days:
            if bucket.day == on:
                return bucket
        raise KeyError(on)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "worker_id": self.worker_id,
            "window": {"start": self.window.start.isoformat(), "end": self.window.end.isoformat()},
            "timezone": self.timezone,
            "week_start_day": self.week_start_day,
            "total_hours": round_hours(self.total),
            "leave_hours": round_hours(self.leave_total),
            "days": [d.to_dict() for d in self.days],
            "weeks": [w.to_dict() for w in self.weeks],
            "months": [m.to_dict() for m in self.months],
            "anomalies": self.anomalies.to_dict(),
        }
