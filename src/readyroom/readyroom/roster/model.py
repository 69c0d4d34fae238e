from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from ..core.constants import DEFAULT_QUALIFICATION_ORDER


@dataclass(frozen=True)
class Qualification:
    qualification_id: str
    name: str
    order: int = DEFAULT_QUALIFICATION_ORDER


@dataclass(frozen=True)
class Squadron:
    squadron_id: str
    name: str


@dataclass(frozen=True)
class PilotIdentity:
    """Roster columns of a pilot, before squadron/qualification enrichment."""

    pilot_id: str
    callsign: str
    board_number: str
    discord_id: Optional[str] = None


@dataclass(frozen=True)
class Pilot:
    """Active pilot snapshot used for one report run."""

    pilot_id: str
    callsign: str
    board_number: str
    discord_id: Optional[str] = None
    qualifications: tuple[Qualification, ...] = field(default_factory=tuple)
    squadron_id: Optional[str] = None
    squadron_name: Optional[str] = None

    @property
    def display_name(self) -> str:
        return f"{self.board_number} - {self.callsign}"


@dataclass(frozen=True)
class RosterFilters:
    """Optional narrowing of the active roster; empty means no filter."""

    squadron_ids: frozenset[str] = frozenset()
    pilot_ids: frozenset[str] = frozenset()
