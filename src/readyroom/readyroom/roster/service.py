from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Optional

from ..common.concurrency import QueryRunner
from ..common.validators import board_number_key
from ..core.exceptions import EmptyInputError
from .model import Pilot, PilotIdentity, Qualification, RosterFilters, Squadron
from .repository import RosterRepository

logger = logging.getLogger(__name__)


def sort_pilots(pilots: list[Pilot]) -> list[Pilot]:
    return sorted(pilots, key=lambda p: (board_number_key(p.board_number), p.pilot_id))


class RosterService:
    """Resolves the population of pilots active during a cycle window."""

    def __init__(self, roster: RosterRepository):
        self._roster = roster

    def resolve_active_pilots(
        self,
        start_date: date,
        end_date: date,
        *,
        runner: QueryRunner,
        filters: Optional[RosterFilters] = None,
    ) -> list[Pilot]:
        filters = filters or RosterFilters()

        pilot_ids = list(dict.fromkeys(runner.call(self._roster.get_active_pilot_ids, start_date, end_date)))
        if filters.pilot_ids:
            pilot_ids = [pid for pid in pilot_ids if pid in filters.pilot_ids]
        if not pilot_ids:
            raise EmptyInputError(f"No active pilots found for {start_date} - {end_date}")

        identities: dict[str, PilotIdentity] = {}
        for identity in runner.call(self._roster.get_pilots_by_ids, pilot_ids):
            identities.setdefault(identity.pilot_id, identity)

        pilots = [
            Pilot(
                pilot_id=i.pilot_id,
                callsign=i.callsign,
                board_number=i.board_number,
                discord_id=i.discord_id,
            )
            for i in (identities[pid] for pid in pilot_ids if pid in identities)
        ]

        squadrons = self._lookup_squadrons(pilots, runner=runner)
        qualifications = self._lookup_qualifications(pilots, start_date, runner=runner)

        enriched: list[Pilot] = []
        for p in pilots:
            sq = squadrons.get(p.pilot_id)
            if filters.squadron_ids and (sq is None or sq.squadron_id not in filters.squadron_ids):
                continue
            enriched.append(
                replace(
                    p,
                    qualifications=qualifications.get(p.pilot_id, ()),
                    squadron_id=sq.squadron_id if sq else None,
                    squadron_name=sq.name if sq else None,
                )
            )

        if not enriched:
            raise EmptyInputError(f"No active pilots found for {start_date} - {end_date}")

        logger.info("Found %d active pilots", len(enriched))
        return sort_pilots(enriched)

    def _lookup_squadrons(self, pilots: list[Pilot], *, runner: QueryRunner) -> dict[str, Squadron]:
        out: dict[str, Squadron] = {}
        for pilot, squadron, error in runner.map_each(lambda p: self._roster.get_current_squadron(p.pilot_id), pilots):
            if error is not None:
                logger.warning("Squadron lookup failed for pilot %s (%s): %s", pilot.pilot_id, pilot.callsign, error)
                continue
            if squadron is not None:
                out[pilot.pilot_id] = squadron
        return out

    def _lookup_qualifications(
        self, pilots: list[Pilot], as_of: date, *, runner: QueryRunner
    ) -> dict[str, tuple[Qualification, ...]]:
        out: dict[str, tuple[Qualification, ...]] = {}
        results = runner.map_each(lambda p: self._roster.get_valid_qualifications(p.pilot_id, as_of), pilots)
        for pilot, quals, error in results:
            if error is not None:
                logger.warning("Qualification lookup failed for pilot %s (%s): %s", pilot.pilot_id, pilot.callsign, error)
                continue
            unique = {q.qualification_id: q for q in reversed(list(quals or []))}
            out[pilot.pilot_id] = tuple(sorted(unique.values(), key=lambda q: (q.order, q.name)))
        return out
