from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.constants import XLSX_MIMETYPE
from ..core.enums import AttendanceMarker, ReportErrorKind
from ..cycles.model import Cycle, Event
from ..roster.model import Pilot


@dataclass(frozen=True)
class PilotRow:
    pilot_id: str
    board_number: str
    callsign: str
    display_name: str
    attendance: dict[str, AttendanceMarker]


@dataclass(frozen=True)
class QualificationRow:
    qualification_id: str
    name: str
    order: int
    attendance: dict[str, int]


@dataclass(frozen=True)
class SquadronRow:
    squadron_id: str
    name: str
    attendance: dict[str, int]


@dataclass(frozen=True)
class CycleSheetData:
    """Everything the spreadsheet emitter needs for one cycle."""

    cycle: Cycle
    events: list[Event]
    pilots: list[Pilot]
    pilot_rows: list[PilotRow]
    qualification_rows: list[QualificationRow]
    squadron_rows: list[SquadronRow]


@dataclass(frozen=True)
class EventSummary:
    """Per-event attendance figures for the cycle summary export."""

    event_id: str
    event_name: str
    event_date: datetime
    attendance_count: int
    total_pilots: int
    attendance_percentage: int
    no_show_count: int
    last_minute_snivel_count: int


@dataclass(frozen=True)
class ReportArtifact:
    filename: str
    content: bytes
    mimetype: str = XLSX_MIMETYPE


@dataclass(frozen=True)
class ReportError:
    kind: ReportErrorKind
    reason: str


@dataclass(frozen=True)
class ReportResult:
    """Either an artifact or a structured error, never both."""

    artifact: Optional[ReportArtifact] = None
    error: Optional[ReportError] = None

    @property
    def ok(self) -> bool:
        return self.artifact is not None

    @classmethod
    def success(cls, artifact: ReportArtifact) -> "ReportResult":
        return cls(artifact=artifact)

    @classmethod
    def failure(cls, kind: ReportErrorKind, reason: str) -> "ReportResult":
        return cls(error=ReportError(kind=kind, reason=reason))
