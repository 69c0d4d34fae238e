from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional

import pytest

from src.readyroom.readyroom.attendance.model import RawAttendanceEntry
from src.readyroom.readyroom.common.concurrency import QueryRunner
from src.readyroom.readyroom.container import wire_container
from src.readyroom.readyroom.core.enums import RollCallResponse
from src.readyroom.readyroom.cycles.model import Cycle, EventRecord
from src.readyroom.readyroom.reports.settings import ReportSettings
from src.readyroom.readyroom.roster.model import PilotIdentity, Qualification, Squadron

UTC = timezone.utc


class InMemoryCycles:
    def __init__(self):
        self.cycles: dict[str, Cycle] = {}
        self.events: dict[str, list[EventRecord]] = {}

    def add(self, cycle: Cycle, events: list[EventRecord]) -> None:
        self.cycles[cycle.cycle_id] = cycle
        self.events[cycle.cycle_id] = list(events)

    def get_cycle(self, cycle_id: str) -> Optional[Cycle]:
        return self.cycles.get(cycle_id)

    def get_events_for_cycle(self, cycle_id: str):
        # Storage order, not start order.
        return list(self.events.get(cycle_id, []))

    def list_cycles(self):
        return sorted(self.cycles.values(), key=lambda c: c.start_date, reverse=True)

    def find_active_cycle(self, on: date) -> Optional[Cycle]:
        active = [c for c in self.cycles.values() if c.start_date <= on <= c.end_date]
        return max(active, key=lambda c: c.start_date) if active else None

    def find_latest_ended_cycle(self, before: date) -> Optional[Cycle]:
        ended = [c for c in self.cycles.values() if c.end_date < before]
        return max(ended, key=lambda c: c.end_date) if ended else None


class InMemoryRoster:
    def __init__(self):
        self.active_ids: list[str] = []
        self.identities: dict[str, PilotIdentity] = {}
        self.squadrons: dict[str, Squadron] = {}
        self.qualifications: dict[str, list[Qualification]] = {}
        self.failing_squadron: set[str] = set()
        self.failing_qualifications: set[str] = set()
        self.qualification_calls: list[tuple[str, date]] = []

    def add_pilot(self, identity: PilotIdentity, *, squadron=None, qualifications=(), active=True) -> None:
        self.identities[identity.pilot_id] = identity
        if squadron is not None:
            self.squadrons[identity.pilot_id] = squadron
        self.qualifications[identity.pilot_id] = list(qualifications)
        if active:
            self.active_ids.append(identity.pilot_id)

    def get_active_pilot_ids(self, start_date: date, end_date: date):
        return list(self.active_ids)

    def get_pilots_by_ids(self, pilot_ids):
        return [self.identities[pid] for pid in pilot_ids if pid in self.identities]

    def get_current_squadron(self, pilot_id: str):
        if pilot_id in self.failing_squadron:
            raise RuntimeError("squadron lookup exploded")
        return self.squadrons.get(pilot_id)

    def get_valid_qualifications(self, pilot_id: str, as_of: date):
        self.qualification_calls.append((pilot_id, as_of))
        if pilot_id in self.failing_qualifications:
            raise RuntimeError("qualification lookup exploded")
        return list(self.qualifications.get(pilot_id, []))


class InMemoryAttendance:
    def __init__(self):
        self.entries: list[RawAttendanceEntry] = []
        self.identity_map: dict[str, str] = {}
        self.failing_identities: set[str] = set()
        self.queried: list[frozenset[str]] = []

    def get_attendance_by_external_message_ids(self, message_ids):
        self.queried.append(frozenset(message_ids))
        return [e for e in self.entries if e.message_id in message_ids and e.response is not None]

    def resolve_pilot_by_external_identity(self, discord_id: str):
        if discord_id in self.failing_identities:
            raise RuntimeError("identity lookup exploded")
        return self.identity_map.get(discord_id)


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 3, 15, 12, 0, tzinfo=UTC)


@pytest.fixture
def runner():
    r = QueryRunner(max_workers=2)
    yield r
    r.close()


@pytest.fixture
def cycles_repo() -> InMemoryCycles:
    return InMemoryCycles()


@pytest.fixture
def roster_repo() -> InMemoryRoster:
    return InMemoryRoster()


@pytest.fixture
def attendance_repo() -> InMemoryAttendance:
    return InMemoryAttendance()


@pytest.fixture
def scenario_a(cycles_repo, roster_repo, attendance_repo):
    """Two events (E1 past, E2 future relative to fixed_now) and two pilots.

    P1 (board 100, Q1, VFA-1) is Present at E1 and Absent at E2.
    P2 (board 200, no qualifications) never answers.
    """

    cycle = Cycle(cycle_id="c1", name="Cycle 1", start_date=date(2026, 3, 1), end_date=date(2026, 3, 31))
    cycles_repo.add(
        cycle,
        [
            EventRecord(
                event_id="e2",
                name="Strike Package Bravo",
                start_datetime=datetime(2026, 3, 20, 19, 0, tzinfo=UTC),
                discord_event_id=[{"messageId": "m2", "guildId": "g1", "channelId": "ch1", "squadronId": "s1"}],
            ),
            EventRecord(
                event_id="e1",
                name="Case I Recovery Practice",
                start_datetime=datetime(2026, 3, 10, 19, 0, tzinfo=UTC),
                discord_event_id=[{"messageId": "m1", "guildId": "g1", "channelId": "ch1", "squadronId": "s1"}],
            ),
        ],
    )

    q1 = Qualification(qualification_id="q1", name="Flight Lead", order=1)
    roster_repo.add_pilot(
        PilotIdentity(pilot_id="p1", callsign="Nubs", board_number="100", discord_id="d1"),
        squadron=Squadron(squadron_id="s1", name="VFA-1"),
        qualifications=[q1],
    )
    roster_repo.add_pilot(PilotIdentity(pilot_id="p2", callsign="Jester", board_number="200", discord_id="d2"))

    attendance_repo.identity_map.update({"d1": "p1", "d2": "p2"})
    attendance_repo.entries.extend(
        [
            RawAttendanceEntry("m1", "d1", RollCallResponse.PRESENT, datetime(2026, 3, 9, 10, 0, tzinfo=UTC)),
            RawAttendanceEntry("m2", "d1", RollCallResponse.ABSENT, datetime(2026, 3, 12, 10, 0, tzinfo=UTC)),
        ]
    )
    return cycle


@pytest.fixture
def container(cycles_repo, roster_repo, attendance_repo):
    return wire_container(
        cycles_repo=cycles_repo,
        roster_repo=roster_repo,
        attendance_repo=attendance_repo,
        report_settings=ReportSettings(max_workers=2, query_timeout_seconds=5.0, deadline_seconds=30.0),
    )
