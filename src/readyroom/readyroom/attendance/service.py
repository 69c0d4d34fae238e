from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Sequence

from ..common.concurrency import QueryRunner
from ..cycles.model import Event
from .model import AttendanceRecord, RawAttendanceEntry
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def keep_latest_responses(records: Sequence[AttendanceRecord]) -> list[AttendanceRecord]:
    """One record per (pilot, event): the most recently updated one.

    Records without a timestamp lose to timestamped ones; among equals the
    later record in input order wins.
    """

    latest: dict[tuple[str, str], AttendanceRecord] = {}
    for rec in records:
        key = (rec.pilot_id, rec.event_id)
        current = latest.get(key)
        if current is None or (rec.updated_at or _OLDEST) >= (current.updated_at or _OLDEST):
            latest[key] = rec
    return list(latest.values())


class AttendanceMatcher:
    """Resolves roll-call entries on event postings to internal pilot ids."""

    def __init__(self, attendance: AttendanceRepository, *, dedupe_responses: bool = True):
        self._attendance = attendance
        self._dedupe = bool(dedupe_responses)

    def match(self, events: Sequence[Event], *, runner: QueryRunner) -> list[AttendanceRecord]:
        posted = [e for e in events if e.message_ids]
        for e in events:
            if not e.message_ids:
                logger.warning("No chat message ids for event: %s", e.name)

        per_event: list[tuple[Event, Sequence[RawAttendanceEntry]]] = []
        for event, entries, error in runner.map_each(
            lambda e: self._attendance.get_attendance_by_external_message_ids(e.message_ids), posted
        ):
            if error is not None:
                raise error
            if not entries:
                logger.info("No attendance data for event: %s", event.name)
            per_event.append((event, entries or ()))

        identity_map = self._resolve_identities(
            {entry.discord_id for _, entries in per_event for entry in entries},
            runner=runner,
        )

        records: list[AttendanceRecord] = []
        dropped = 0
        for event, entries in per_event:
            for entry in entries:
                if entry.response is None:
                    continue
                pilot_id = identity_map.get(entry.discord_id)
                if pilot_id is None:
                    dropped += 1
                    continue
                records.append(
                    AttendanceRecord(
                        pilot_id=pilot_id,
                        event_id=event.event_id,
                        response=entry.response,
                        updated_at=entry.updated_at,
                    )
                )

        if dropped:
            logger.info("Dropped %d attendance entries with no matching pilot", dropped)
        if self._dedupe:
            records = keep_latest_responses(records)
        logger.info("Found %d attendance records", len(records))
        return records

    def _resolve_identities(self, discord_ids: set[str], *, runner: QueryRunner) -> dict[str, str]:
        out: dict[str, str] = {}
        results = runner.map_each(self._attendance.resolve_pilot_by_external_identity, sorted(discord_ids))
        for discord_id, pilot_id, error in results:
            if error is not None:
                logger.warning("Identity lookup failed for external id %s: %s", discord_id, error)
                continue
            if pilot_id:
                out[discord_id] = pilot_id
        return out
