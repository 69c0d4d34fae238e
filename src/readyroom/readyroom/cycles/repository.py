from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import Cycle, EventRecord


class CycleRepository(Protocol):
    def get_cycle(self, cycle_id: str) -> Optional[Cycle]:
        raise NotImplementedError

    def get_events_for_cycle(self, cycle_id: str) -> Sequence[EventRecord]:
        """Events belonging to the cycle, ordered by start time ascending."""

        raise NotImplementedError

    def list_cycles(self) -> Sequence[Cycle]:
        """All cycles, most recent start first."""

        raise NotImplementedError

    def find_active_cycle(self, on: date) -> Optional[Cycle]:
        raise NotImplementedError

    def find_latest_ended_cycle(self, before: date) -> Optional[Cycle]:
        raise NotImplementedError
