"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

HOUR_MINUTES = 60

DEFAULT_SCHEDULE_HOURS = 8
DEFAULT_LUNCH_THRESHOLD_MINUTES = 6 * HOUR_MINUTES
DEFAULT_LUNCH_BREAK_MINUTES = 30

# Admin "work hours" values start the day at this hour.
DEFAULT_DAY_START_HOUR = 8

MIN_CONSOLIDATION_YEAR = 2000
MAX_CONSOLIDATION_YEAR = 2100

DEFAULT_CONSOLIDATION_MAX_WORKERS = 4
DEFAULT_EMPLOYEE_TIMEOUT_SECONDS = 30.0

ADMIN_OWNER = "admin"
