"""Settings shared by every environment, read from the process environment."""

import os

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "timecard"),
}

# "tenant:database,tenant2:database2". Sessions without a tenant use DB_CONFIG["database"].
TENANT_DATABASES = os.getenv("TENANT_DATABASES", "")

DEFAULT_TIMEZONE = os.getenv("DEFAULT_TIMEZONE", "America/Chicago")
# 0 = Sunday ... 6 = Saturday
WEEK_START_DAY = int(os.getenv("WEEK_START_DAY", "0"))
CLOCK_OUT_GRACE_MINUTES = int(os.getenv("CLOCK_OUT_GRACE_MINUTES", "30"))
OVERTIME_THRESHOLD_HOURS = float(os.getenv("OVERTIME_THRESHOLD_HOURS", "40"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
