from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import RollCallResponse


@dataclass(frozen=True)
class RawAttendanceEntry:
    """Roll-call row as stored by the chat bot, keyed by external ids."""

    message_id: str
    discord_id: str
    response: RollCallResponse
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class AttendanceRecord:
    """(pilot, event, response) triple consumed by the aggregators."""

    pilot_id: str
    event_id: str
    response: RollCallResponse
    updated_at: Optional[datetime] = None
