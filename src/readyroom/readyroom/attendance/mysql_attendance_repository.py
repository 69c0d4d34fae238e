from __future__ import annotations

import logging
from typing import AbstractSet, Optional, Sequence

from ..common.datetime_utils import parse_timestamp
from ..core.enums import RollCallResponse
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import RawAttendanceEntry
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_attendance_by_external_message_ids(self, message_ids: AbstractSet[str]) -> Sequence[RawAttendanceEntry]:
        ids = sorted(message_ids)
        if not ids:
            return []

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT discord_event_id, discord_id, roll_call_response, updated_at
                FROM discord_event_attendance
                WHERE discord_event_id IN ({in_clause(ids)})
                  AND roll_call_response IS NOT NULL
                ORDER BY updated_at ASC
                """,
                tuple(ids),
            )
            rows = fetchall(cur)

        out: list[RawAttendanceEntry] = []
        for r in rows:
            if not r.get("discord_id"):
                continue
            try:
                response = RollCallResponse(r["roll_call_response"])
            except ValueError:
                logger.warning("Skipping unknown roll call response %r", r["roll_call_response"])
                continue
            out.append(
                RawAttendanceEntry(
                    message_id=str(r["discord_event_id"]),
                    discord_id=str(r["discord_id"]),
                    response=response,
                    updated_at=parse_timestamp(r["updated_at"]) if r.get("updated_at") else None,
                )
            )
        return out

    def resolve_pilot_by_external_identity(self, discord_id: str) -> Optional[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id FROM pilots WHERE discord_id=%s LIMIT 1", (discord_id,))
            r = fetchone(cur)
            return str(r["id"]) if r else None
