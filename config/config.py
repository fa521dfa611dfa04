"""Settings shared by every environment; values come from the environment (.env)."""

import os

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "hrms_attendance"),
    "pool_size": int(os.getenv("DB_POOL_SIZE", "5")),
}

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Calendar finalization job
FINALIZATION_SCHEDULER_ENABLED = bool(int(os.getenv("FINALIZATION_SCHEDULER_ENABLED", "1")))
FINALIZATION_INTERVAL_MINUTES = int(os.getenv("FINALIZATION_INTERVAL_MINUTES", "15"))
# Minutes after shift end before a day is closed out
FINALIZATION_BUFFER_MINUTES = int(os.getenv("FINALIZATION_BUFFER_MINUTES", "30"))
BULK_DELAY_SECONDS = float(os.getenv("BULK_DELAY_SECONDS", "0.1"))

# Python weekday numbers (Monday=0), used when no working rule is configured
WEEKEND_DAYS = os.getenv("WEEKEND_DAYS", "5,6")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
