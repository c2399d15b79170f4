from __future__ import annotations

from enum import Enum, IntEnum


class Role(str, Enum):
    """Caller role, as provided by the external auth layer."""

    WORKER = "worker"
    MANAGER = "manager"


class PunchStatus(str, Enum):
    """Approval status persisted on a punch (and on leave requests)."""

    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    CANCELLED = "Cancelled"


class PunchState(str, Enum):
    """Lifecycle state derived from status + time_out."""

    OPEN = "open"
    CLOSED = "closed"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class GeofenceVerdict(str, Enum):
    WITHIN = "within"
    OUTSIDE = "outside"
    UNDETERMINED = "undetermined"


class PingOutcome(str, Enum):
    RECORDED = "recorded"
    FEATURE_NOT_ENABLED = "feature_not_enabled"


class OverlapCase(str, Enum):
    """Which way a candidate interval collides with an existing one."""

    WITHIN_EXISTING = "within_existing"
    CONTAINS_EXISTING = "contains_existing"
    STARTS_DURING = "starts_during"
    ENDS_DURING = "ends_during"


class TieBreak(str, Enum):
    """How ShiftMatcher picks among shifts whose windows all contain a punch."""

    FIRST_LISTED = "first_listed"
    LATEST_START = "latest_start"


class Weekday(IntEnum):
    SUNDAY = 0
    MONDAY = 1
    TUESDAY = 2
    WEDNESDAY = 3
    THURSDAY = 4
    FRIDAY = 5
    SATURDAY = 6


class DetailKind(str, Enum):
    PUNCH = "punch"
    LEAVE = "leave"
