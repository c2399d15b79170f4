"""Date/time helpers.

Every conversion between stored UTC instants and a caller's local calendar goes
through `LocalCalendar`. Call sites never call `astimezone` on their own.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Iterator, Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..core.constants import HOURS_DECIMALS, WEEKDAY_NAMES
from ..core.exceptions import ValidationError


def now_utc() -> datetime:
    """Current UTC time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Naive datetimes are assumed to already be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid date {value!r}, expected YYYY-MM-DD")


def parse_clock_time(value: object) -> time:
    """Parse a wall-clock value such as '08:30' or '08:30:00'."""
    if isinstance(value, time):
        return value
    try:
        parts = str(value).strip().split(":")
        hours = int(parts[0])
        minutes = int(parts[1])
        seconds = int(parts[2]) if len(parts) >= 3 and parts[2] else 0
        return time(hour=hours, minute=minutes, second=seconds)
    except (IndexError, ValueError):
        raise ValidationError(f"Invalid time of day {value!r}, expected HH:MM")


def parse_iso_utc(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp (``Z`` suffix accepted) into an aware UTC datetime."""
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise ValidationError(f"Invalid timestamp {value!r}")
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        raise ValidationError(f"Invalid timestamp {value!r}")
    return ensure_utc(parsed)


def to_iso_utc(value: Optional[datetime]) -> Optional[str]:
    """Format as ISO-8601 UTC with a ``Z`` suffix."""
    if value is None:
        return None
    iso = ensure_utc(value).isoformat()
    if iso.endswith("+00:00"):
        return iso[:-6] + "Z"
    return iso


def weekday_index(day: date) -> int:
    """0 = Sunday ... 6 = Saturday."""
    return (day.weekday() + 1) % 7


def weekday_name(day: date) -> str:
    return WEEKDAY_NAMES[weekday_index(day)]


def week_start_for(day: date, week_start_day: int) -> date:
    offset = (weekday_index(day) - int(week_start_day)) % 7
    return day - timedelta(days=offset)


def round_hours(duration: timedelta) -> float:
    """Exact duration to hours, rounded only here at the output edge."""
    return round(duration.total_seconds() / 3600.0, HOURS_DECIMALS)


@dataclass(frozen=True)
class DateWindow:
    """Inclusive range of local calendar dates."""

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValidationError("Window end must be on or after window start")

    def days(self) -> Iterator[date]:
        current = self.start
        while current <= self.end:
            yield current
            current += timedelta(days=1)

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    def __len__(self) -> int:
        return (self.end - self.start).days + 1


class LocalCalendar:
    """The single conversion point between UTC instants and one IANA timezone."""

    def __init__(self, tz_name: str):
        try:
            self._tz = ZoneInfo(tz_name)
        except (ZoneInfoNotFoundError, ValueError, TypeError):
            raise ValidationError(f"Unknown timezone {tz_name!r}")
        self.tz_name = tz_name

    def to_local(self, moment: datetime) -> datetime:
        return ensure_utc(moment).astimezone(self._tz)

    def local_date(self, moment: datetime) -> date:
        return self.to_local(moment).date()

    def at_local_time(self, day: date, at: time) -> datetime:
        """UTC instant for a wall-clock time on a local date."""
        return datetime.combine(day, at, tzinfo=self._tz).astimezone(timezone.utc)

    def start_of_day_utc(self, day: date) -> datetime:
        return self.at_local_time(day, time.min)

    def window_bounds_utc(self, window: DateWindow) -> Tuple[datetime, datetime]:
        """Half-open UTC bounds ``[start, end)`` covering every local date of the window."""
        return (
            self.start_of_day_utc(window.start),
            self.start_of_day_utc(window.end + timedelta(days=1)),
        )
