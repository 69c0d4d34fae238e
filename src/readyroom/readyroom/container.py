from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceMatcher
from .cycles.mysql_cycle_repository import MySQLCycleRepository
from .cycles.repository import CycleRepository
from .cycles.service import CycleService
from .database.connection import DBConfig, DatabaseConnection
from .reports.service import AttendanceReportService
from .reports.settings import ReportSettings
from .roster.mysql_roster_repository import MySQLRosterRepository
from .roster.repository import RosterRepository
from .roster.service import RosterService


@dataclass(frozen=True)
class Container:
    cycles_repo: CycleRepository
    roster_repo: RosterRepository
    attendance_repo: AttendanceRepository

    cycle_service: CycleService
    roster_service: RosterService
    attendance_matcher: AttendanceMatcher
    report_service: AttendanceReportService


def wire_container(
    *,
    cycles_repo: CycleRepository,
    roster_repo: RosterRepository,
    attendance_repo: AttendanceRepository,
    report_settings: Optional[ReportSettings] = None,
) -> Container:
    """Compose services over any repository implementations (MySQL or in-memory)."""

    report_settings = report_settings or ReportSettings()

    cycle_service = CycleService(cycles_repo)
    roster_service = RosterService(roster_repo)
    attendance_matcher = AttendanceMatcher(attendance_repo, dedupe_responses=report_settings.dedupe_responses)
    report_service = AttendanceReportService(
        cycle_service,
        roster_service,
        attendance_matcher,
        settings=report_settings,
    )

    return Container(
        cycles_repo=cycles_repo,
        roster_repo=roster_repo,
        attendance_repo=attendance_repo,
        cycle_service=cycle_service,
        roster_service=roster_service,
        attendance_matcher=attendance_matcher,
        report_service=report_service,
    )


def build_container(*, db_config: dict, report_settings: Optional[ReportSettings] = None) -> Container:
    report_settings = report_settings or ReportSettings()
    config = DBConfig.from_dict(db_config)
    if config.max_execution_ms is None and report_settings.query_timeout_seconds:
        # Stop the server-side statement once the runner has stopped waiting on it.
        config = replace(config, max_execution_ms=int(report_settings.query_timeout_seconds * 1000))
    conn = DatabaseConnection.get_instance(config)

    return wire_container(
        cycles_repo=MySQLCycleRepository(conn),
        roster_repo=MySQLRosterRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        report_settings=report_settings,
    )
