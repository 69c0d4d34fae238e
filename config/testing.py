import os

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "readyroom_test"),
    "connect_timeout": 2,
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

REPORT_MAX_WORKERS = 2
REPORT_QUERY_TIMEOUT_SECONDS = 5.0
REPORT_DEADLINE_SECONDS = 30.0
REPORT_DEDUPE_RESPONSES = True
REPORT_TIMEZONE = "UTC"

AUTO_INIT_DB = False
