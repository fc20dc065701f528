import os

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "worktime_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

LUNCH_THRESHOLD_MINUTES = 360
LUNCH_BREAK_MINUTES = 30
DEFAULT_SCHEDULE_HOURS = 8

CONSOLIDATION_MAX_WORKERS = 2
CONSOLIDATION_EMPLOYEE_TIMEOUT_SECONDS = 5.0

AUTO_INIT_DB = False
