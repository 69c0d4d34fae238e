from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Optional


@dataclass(frozen=True)
class Cycle:
    """Named training period bounding which events and pilots are in scope."""

    cycle_id: str
    name: str
    start_date: date
    end_date: date
    cycle_type: str = "Training"


@dataclass(frozen=True)
class Publication:
    """Where one event was posted on the chat platform."""

    message_id: str
    guild_id: Optional[str] = None
    channel_id: Optional[str] = None
    squadron_id: Optional[str] = None


@dataclass(frozen=True)
class EventRecord:
    """Stored shape of an event row; `discord_event_id` is the raw column value."""

    event_id: str
    name: str
    start_datetime: datetime
    discord_event_id: Any = None


@dataclass(frozen=True)
class Event:
    event_id: str
    name: str
    start_datetime: datetime
    publications: tuple[Publication, ...] = field(default_factory=tuple)

    @property
    def message_ids(self) -> frozenset[str]:
        return frozenset(p.message_id for p in self.publications)
