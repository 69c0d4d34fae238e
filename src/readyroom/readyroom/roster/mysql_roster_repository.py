from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.constants import DEFAULT_QUALIFICATION_ORDER
from ..core.exceptions import LookupFailure
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, in_clause
from .model import PilotIdentity, Qualification, Squadron
from .repository import RosterRepository


class MySQLRosterRepository(RosterRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_active_pilot_ids(self, start_date: date, end_date: date) -> Sequence[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT DISTINCT ps.pilot_id
                FROM pilot_statuses ps
                JOIN statuses s ON s.id = ps.status_id
                WHERE s.is_active = 1
                  AND ps.start_date <= %s
                  AND (ps.end_date IS NULL OR ps.end_date >= %s)
                """,
                (end_date, start_date),
            )
            return [str(r["pilot_id"]) for r in fetchall(cur)]

    def get_pilots_by_ids(self, pilot_ids: Sequence[str]) -> Sequence[PilotIdentity]:
        if not pilot_ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT id, callsign, board_number, discord_id FROM pilots WHERE id IN ({in_clause(pilot_ids)})",
                tuple(pilot_ids),
            )
            return [
                PilotIdentity(
                    pilot_id=str(r["id"]),
                    callsign=r["callsign"],
                    board_number=str(r["board_number"]),
                    discord_id=str(r["discord_id"]) if r.get("discord_id") else None,
                )
                for r in fetchall(cur)
            ]

    def get_current_squadron(self, pilot_id: str) -> Optional[Squadron]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT sq.id, sq.name
                FROM pilot_assignments pa
                JOIN org_squadrons sq ON sq.id = pa.squadron_id
                WHERE pa.pilot_id = %s AND pa.end_date IS NULL
                LIMIT 2
                """,
                (pilot_id,),
            )
            rows = fetchall(cur)
        if len(rows) > 1:
            raise LookupFailure(f"Pilot {pilot_id} has more than one open squadron assignment")
        if not rows:
            return None
        return Squadron(squadron_id=str(rows[0]["id"]), name=rows[0]["name"])

    def get_valid_qualifications(self, pilot_id: str, as_of: date) -> Sequence[Qualification]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT q.id, q.name, q.`order` AS qual_order
                FROM pilot_qualifications pq
                JOIN qualifications q ON q.id = pq.qualification_id
                WHERE pq.pilot_id = %s
                  AND (pq.expiry_date IS NULL OR pq.expiry_date >= %s)
                """,
                (pilot_id, as_of),
            )
            return [
                Qualification(
                    qualification_id=str(r["id"]),
                    name=r["name"],
                    order=int(r["qual_order"]) if r.get("qual_order") is not None else DEFAULT_QUALIFICATION_ORDER,
                )
                for r in fetchall(cur)
            ]
