from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional, Sequence

from ..common.concurrency import QueryRunner
from ..common.datetime_utils import now_utc, parse_timestamp
from ..core.exceptions import EmptyInputError, NotFoundError
from .model import Cycle, Event, EventRecord, Publication
from .repository import CycleRepository

logger = logging.getLogger(__name__)


def _publication_from_dict(item: dict) -> Optional[Publication]:
    message_id = item.get("messageId") or item.get("message_id")
    if not message_id:
        return None

    def _opt(*keys: str) -> Optional[str]:
        for key in keys:
            if item.get(key):
                return str(item[key])
        return None

    return Publication(
        message_id=str(message_id),
        guild_id=_opt("guildId", "guild_id"),
        channel_id=_opt("channelId", "channel_id"),
        squadron_id=_opt("squadronId", "squadron_id"),
    )


def normalize_publications(raw: Any) -> tuple[tuple[Publication, ...], bool]:
    """Turn a stored `discord_event_id` value into Publications.

    Returns `(publications, legacy)`. `legacy` is True when the value used the
    old single message id shape instead of the publication array.
    """

    if raw is None or raw == "" or raw == []:
        return (), False

    if isinstance(raw, (str, int)):
        return (Publication(message_id=str(raw)),), True

    if isinstance(raw, dict):
        pub = _publication_from_dict(raw)
        return ((pub,) if pub else ()), False

    if isinstance(raw, (list, tuple)):
        pubs: list[Publication] = []
        legacy = False
        for item in raw:
            if isinstance(item, dict):
                pub = _publication_from_dict(item)
            elif isinstance(item, (str, int)) and str(item):
                pub, legacy = Publication(message_id=str(item)), True
            else:
                pub = None
            if pub is not None:
                pubs.append(pub)
        return tuple(pubs), legacy

    logger.warning("Ignoring unrecognised publication value of type %s", type(raw).__name__)
    return (), False


def to_event(record: EventRecord) -> Event:
    publications, legacy = normalize_publications(record.discord_event_id)
    if legacy:
        logger.warning("Event %s (%s) uses the legacy single message id shape", record.name, record.event_id)
    if not publications:
        logger.warning("No chat publications for event: %s", record.name)
    return Event(
        event_id=record.event_id,
        name=record.name,
        start_datetime=parse_timestamp(record.start_datetime),
        publications=publications,
    )


class CycleService:
    """Loads cycles and their ordered event lists."""

    def __init__(self, cycles: CycleRepository):
        self._cycles = cycles

    def resolve(self, cycle_id: str, *, runner: QueryRunner) -> tuple[Cycle, list[Event]]:
        cycle = runner.call(self._cycles.get_cycle, cycle_id)
        if cycle is None:
            raise NotFoundError(f"Cycle not found: {cycle_id}")

        records = runner.call(self._cycles.get_events_for_cycle, cycle_id)
        if not records:
            raise EmptyInputError(f"No events found for cycle: {cycle.name}")

        events = sorted((to_event(r) for r in records), key=lambda e: e.start_datetime)
        logger.info("Found %d events for cycle %s", len(events), cycle.name)
        return cycle, events

    def list_cycles(self) -> Sequence[Cycle]:
        return list(self._cycles.list_cycles())

    def get_default_cycle(self, *, now: Optional[datetime] = None) -> Optional[Cycle]:
        """Cycle active today, else the most recently completed one."""

        today = (now or now_utc()).date()
        return self._cycles.find_active_cycle(today) or self._cycles.find_latest_ended_cycle(today)
