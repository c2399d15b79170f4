import os

from .config import (  # noqa: F401
    CLOCK_OUT_GRACE_MINUTES,
    DB_CONFIG,
    DEFAULT_TIMEZONE,
    LOG_LEVEL,
    OVERTIME_THRESHOLD_HOURS,
    TENANT_DATABASES,
    WEEK_START_DAY,
)

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DEBUG = False

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
