from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Union
from zoneinfo import ZoneInfo


def parse_iso_date(value: Union[str, date]) -> date:
    """Parse YYYY-MM-DD string into date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_timestamp(value: Union[str, datetime]) -> datetime:
    """Parse a stored timestamp into an aware datetime.

    Naive values coming back from the driver are stored in UTC.
    """
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def now_utc() -> datetime:
    """Current aware time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(timezone.utc)


def format_event_date(value: datetime, tz_name: str = "UTC") -> str:
    """Render an event start as MM/DD/YYYY in the report timezone."""
    return parse_timestamp(value).astimezone(ZoneInfo(tz_name)).strftime("%m/%d/%Y")
