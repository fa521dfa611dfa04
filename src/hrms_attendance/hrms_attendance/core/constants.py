"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_FULL_DAY_HOURS = 8.0
DEFAULT_HALF_DAY_HOURS = 4.0
DEFAULT_GRACE_MINUTES = 0
DEFAULT_FINALIZATION_BUFFER_MINUTES = 30
DEFAULT_FINALIZATION_INTERVAL_MINUTES = 15
DEFAULT_BULK_DELAY_SECONDS = 0.1
# Python weekday numbers (Monday=0): Saturday and Sunday.
DEFAULT_WEEKEND_DAYS = (5, 6)
DEFAULT_RECORDS_DAYS = 31
MAX_BULK_RANGE_DAYS = 366
