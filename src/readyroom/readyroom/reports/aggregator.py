"""Pivot-table builders for cycle attendance reports.

Every function here is a pure transform of `(pilots, events, records)`; none
of them touches a repository, so they can be tested with plain dataclasses.
"""

from __future__ import annotations

import math
from datetime import timedelta
from typing import Sequence

from ..attendance.model import AttendanceRecord
from ..common.datetime_utils import parse_timestamp
from ..core.constants import LAST_MINUTE_SNIVEL_HOURS
from ..core.enums import AttendanceMarker, RollCallResponse
from ..cycles.model import Event
from ..roster.model import Pilot, Qualification
from .model import EventSummary, PilotRow, QualificationRow, SquadronRow

MarkerIndex = dict[tuple[str, str], AttendanceMarker]


def marker_for(responses: Sequence[RollCallResponse]) -> AttendanceMarker:
    """Marker for one (pilot, event) cell given every response recorded for it.

    Tentative and "no record" both collapse to '?'.
    """

    if RollCallResponse.PRESENT in responses:
        return AttendanceMarker.PRESENT
    if RollCallResponse.ABSENT in responses:
        return AttendanceMarker.ABSENT
    return AttendanceMarker.UNKNOWN


def build_marker_index(records: Sequence[AttendanceRecord]) -> MarkerIndex:
    grouped: dict[tuple[str, str], list[RollCallResponse]] = {}
    for r in records:
        grouped.setdefault((r.pilot_id, r.event_id), []).append(r.response)
    return {key: marker_for(responses) for key, responses in grouped.items()}


def _present_pilot_ids(events: Sequence[Event], markers: MarkerIndex) -> dict[str, set[str]]:
    present: dict[str, set[str]] = {e.event_id: set() for e in events}
    for (pilot_id, event_id), marker in markers.items():
        if marker is AttendanceMarker.PRESENT and event_id in present:
            present[event_id].add(pilot_id)
    return present


def build_pilot_rows(
    pilots: Sequence[Pilot], events: Sequence[Event], records: Sequence[AttendanceRecord]
) -> list[PilotRow]:
    markers = build_marker_index(records)
    return [
        PilotRow(
            pilot_id=p.pilot_id,
            board_number=p.board_number,
            callsign=p.callsign,
            display_name=p.display_name,
            attendance={
                e.event_id: markers.get((p.pilot_id, e.event_id), AttendanceMarker.UNKNOWN) for e in events
            },
        )
        for p in pilots
    ]


def build_qualification_rows(
    pilots: Sequence[Pilot], events: Sequence[Event], records: Sequence[AttendanceRecord]
) -> list[QualificationRow]:
    qualifications: dict[str, Qualification] = {}
    holders: dict[str, set[str]] = {}
    for p in pilots:
        for q in p.qualifications:
            qualifications.setdefault(q.qualification_id, q)
            holders.setdefault(q.qualification_id, set()).add(p.pilot_id)

    present = _present_pilot_ids(events, build_marker_index(records))
    ordered = sorted(qualifications.values(), key=lambda q: (q.order, q.name, q.qualification_id))

    return [
        QualificationRow(
            qualification_id=q.qualification_id,
            name=q.name,
            order=q.order,
            attendance={e.event_id: len(holders[q.qualification_id] & present[e.event_id]) for e in events},
        )
        for q in ordered
    ]


def build_squadron_rows(
    pilots: Sequence[Pilot], events: Sequence[Event], records: Sequence[AttendanceRecord]
) -> list[SquadronRow]:
    names: dict[str, str] = {}
    members: dict[str, set[str]] = {}
    for p in pilots:
        if p.squadron_id and p.squadron_name:
            names[p.squadron_id] = p.squadron_name
            members.setdefault(p.squadron_id, set()).add(p.pilot_id)

    present = _present_pilot_ids(events, build_marker_index(records))
    ordered = sorted(names.items(), key=lambda item: (item[1], item[0]))

    return [
        SquadronRow(
            squadron_id=squadron_id,
            name=name,
            attendance={e.event_id: len(members[squadron_id] & present[e.event_id]) for e in events},
        )
        for squadron_id, name in ordered
    ]


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _is_last_minute(record: AttendanceRecord, event: Event) -> bool:
    if record.updated_at is None:
        return False
    cutoff = parse_timestamp(event.start_datetime) - timedelta(hours=LAST_MINUTE_SNIVEL_HOURS)
    return parse_timestamp(record.updated_at) >= cutoff


def build_event_summaries(
    pilots: Sequence[Pilot], events: Sequence[Event], records: Sequence[AttendanceRecord]
) -> list[EventSummary]:
    """Per-event counts: present, no-shows and late Absent answers ("snivels")."""

    active = {p.pilot_id for p in pilots}
    total = len(active)
    markers = build_marker_index([r for r in records if r.pilot_id in active])
    present = _present_pilot_ids(events, markers)

    out: list[EventSummary] = []
    for e in events:
        responded = {pid for (pid, eid) in markers if eid == e.event_id}
        snivels = _last_minute_absentees(records, e, markers)
        attended = len(present[e.event_id])
        out.append(
            EventSummary(
                event_id=e.event_id,
                event_name=e.name,
                event_date=e.start_datetime,
                attendance_count=attended,
                total_pilots=total,
                attendance_percentage=_round_half_up(attended / total * 100) if total else 0,
                no_show_count=total - len(responded),
                last_minute_snivel_count=len(snivels),
            )
        )
    return out


def _last_minute_absentees(records: Sequence[AttendanceRecord], event: Event, markers: MarkerIndex) -> set[str]:
    return {
        r.pilot_id
        for r in records
        if r.event_id == event.event_id
        and r.response is RollCallResponse.ABSENT
        and markers.get((r.pilot_id, r.event_id)) is AttendanceMarker.ABSENT
        and _is_last_minute(r, event)
    }
