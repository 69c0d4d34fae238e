from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from ..core.constants import DEFAULT_DEADLINE_SECONDS, DEFAULT_MAX_WORKERS, DEFAULT_QUERY_TIMEOUT_SECONDS


@dataclass(frozen=True)
class ReportSettings:
    max_workers: int = DEFAULT_MAX_WORKERS
    query_timeout_seconds: Optional[float] = DEFAULT_QUERY_TIMEOUT_SECONDS
    deadline_seconds: Optional[float] = DEFAULT_DEADLINE_SECONDS
    dedupe_responses: bool = True
    timezone: str = "UTC"

    @classmethod
    def from_settings(cls, settings: Any) -> "ReportSettings":
        """Build from a config module (see config/development.py)."""

        def _seconds(name: str, default: Optional[float]) -> Optional[float]:
            value = getattr(settings, name, default)
            if value is None or float(value) <= 0:
                return None
            return float(value)

        return cls(
            max_workers=int(getattr(settings, "REPORT_MAX_WORKERS", DEFAULT_MAX_WORKERS)),
            query_timeout_seconds=_seconds("REPORT_QUERY_TIMEOUT_SECONDS", DEFAULT_QUERY_TIMEOUT_SECONDS),
            deadline_seconds=_seconds("REPORT_DEADLINE_SECONDS", DEFAULT_DEADLINE_SECONDS),
            dedupe_responses=bool(getattr(settings, "REPORT_DEDUPE_RESPONSES", True)),
            timezone=str(getattr(settings, "REPORT_TIMEZONE", "UTC")),
        )
