from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..common.datetime_utils import parse_iso_date, parse_timestamp
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, decode_json_column, fetchall, fetchone
from .model import Cycle, EventRecord
from .repository import CycleRepository

_CYCLE_COLUMNS = "id, name, start_date, end_date, type"


def _to_cycle(r: dict) -> Cycle:
    return Cycle(
        cycle_id=str(r["id"]),
        name=r["name"],
        start_date=parse_iso_date(r["start_date"]),
        end_date=parse_iso_date(r["end_date"]),
        cycle_type=r.get("type") or "Training",
    )


class MySQLCycleRepository(CycleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_cycle(self, cycle_id: str) -> Optional[Cycle]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_CYCLE_COLUMNS} FROM cycles WHERE id=%s", (cycle_id,))
            r = fetchone(cur)
            return _to_cycle(r) if r else None

    def get_events_for_cycle(self, cycle_id: str) -> Sequence[EventRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, name, start_datetime, discord_event_id
                FROM events
                WHERE cycle_id=%s
                ORDER BY start_datetime ASC
                """,
                (cycle_id,),
            )
            return [
                EventRecord(
                    event_id=str(r["id"]),
                    name=r["name"],
                    start_datetime=parse_timestamp(r["start_datetime"]),
                    discord_event_id=decode_json_column(r.get("discord_event_id")),
                )
                for r in fetchall(cur)
            ]

    def list_cycles(self) -> Sequence[Cycle]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_CYCLE_COLUMNS} FROM cycles ORDER BY start_date DESC")
            return [_to_cycle(r) for r in fetchall(cur)]

    def find_active_cycle(self, on: date) -> Optional[Cycle]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_CYCLE_COLUMNS} FROM cycles
                WHERE start_date <= %s AND end_date >= %s
                ORDER BY start_date DESC
                LIMIT 1
                """,
                (on, on),
            )
            r = fetchone(cur)
            return _to_cycle(r) if r else None

    def find_latest_ended_cycle(self, before: date) -> Optional[Cycle]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_CYCLE_COLUMNS} FROM cycles
                WHERE end_date < %s
                ORDER BY end_date DESC
                LIMIT 1
                """,
                (before,),
            )
            r = fetchone(cur)
            return _to_cycle(r) if r else None
