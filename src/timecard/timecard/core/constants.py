"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

EARTH_RADIUS_KM = 6371.0
METERS_PER_KM = 1000.0

DEFAULT_TIMEZONE = "America/Chicago"
DEFAULT_CLOCK_OUT_GRACE_MINUTES = 30
DEFAULT_OVERTIME_THRESHOLD_HOURS = 40.0
HOURS_DECIMALS = 2

# Index 0 is Sunday, matching the week_start_day convention used by reports.
WEEKDAY_NAMES = (
    "sunday",
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
)
