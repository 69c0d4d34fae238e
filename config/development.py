import os

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "readyroom"),
    "connect_timeout": int(os.getenv("DB_CONNECT_TIMEOUT", "10")),
    "max_execution_ms": os.getenv("DB_MAX_EXECUTION_MS"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# Report pipeline tuning; a timeout/deadline of 0 disables it.
REPORT_MAX_WORKERS = int(os.getenv("REPORT_MAX_WORKERS", "8"))
REPORT_QUERY_TIMEOUT_SECONDS = float(os.getenv("REPORT_QUERY_TIMEOUT_SECONDS", "15"))
REPORT_DEADLINE_SECONDS = float(os.getenv("REPORT_DEADLINE_SECONDS", "120"))
REPORT_DEDUPE_RESPONSES = bool(int(os.getenv("REPORT_DEDUPE_RESPONSES", "1")))
REPORT_TIMEZONE = os.getenv("REPORT_TIMEZONE", "UTC")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
