from __future__ import annotations

from enum import Enum


class RollCallResponse(str, Enum):
    """Roll-call answer a user submits against an event posting."""

    PRESENT = "Present"
    ABSENT = "Absent"
    TENTATIVE = "Tentative"


class AttendanceMarker(str, Enum):
    """Single-symbol code placed in a pilot matrix cell."""

    PRESENT = "X"
    ABSENT = ""
    UNKNOWN = "?"


class ReportErrorKind(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    EMPTY_INPUT = "EMPTY_INPUT"
    TIMEOUT = "TIMEOUT"
    CANCELLED = "CANCELLED"
    UNEXPECTED = "UNEXPECTED"
