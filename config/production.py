import os

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "worktime_db"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

LUNCH_THRESHOLD_MINUTES = int(os.getenv("LUNCH_THRESHOLD_MINUTES", "360"))
LUNCH_BREAK_MINUTES = int(os.getenv("LUNCH_BREAK_MINUTES", "30"))
DEFAULT_SCHEDULE_HOURS = int(os.getenv("DEFAULT_SCHEDULE_HOURS", "8"))

CONSOLIDATION_MAX_WORKERS = int(os.getenv("CONSOLIDATION_MAX_WORKERS", "8"))
CONSOLIDATION_EMPLOYEE_TIMEOUT_SECONDS = float(os.getenv("CONSOLIDATION_EMPLOYEE_TIMEOUT_SECONDS", "60"))

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
