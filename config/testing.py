import os

from .config import (  # noqa: F401
    CLOCK_OUT_GRACE_MINUTES,
    DB_CONFIG,
    DEFAULT_TIMEZONE,
    OVERTIME_THRESHOLD_HOURS,
    WEEK_START_DAY,
)

SECRET_KEY = "test-secret"

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

TENANT_DATABASES = "acme:acme_db,globex:globex_db"

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
