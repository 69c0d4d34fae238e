"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

# Excel refuses sheet names longer than this.
MAX_SHEET_NAME_LENGTH = 31

DEFAULT_QUALIFICATION_ORDER = 999
DEFAULT_MAX_WORKERS = 8
DEFAULT_QUERY_TIMEOUT_SECONDS = 15.0
DEFAULT_DEADLINE_SECONDS = 120.0

LAST_MINUTE_SNIVEL_HOURS = 24

REPORT_FILE_EXTENSION = "xlsx"
XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
