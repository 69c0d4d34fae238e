from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import PilotIdentity, Qualification, Squadron


class RosterRepository(Protocol):
    """Read-only roster queries.

    Note: implementations may be called from worker threads concurrently.
    """

    def get_active_pilot_ids(self, start_date: date, end_date: date) -> Sequence[str]:
        """Pilots holding an active-flagged status overlapping [start_date, end_date]."""

        raise NotImplementedError

    def get_pilots_by_ids(self, pilot_ids: Sequence[str]) -> Sequence[PilotIdentity]:
        raise NotImplementedError

    def get_current_squadron(self, pilot_id: str) -> Optional[Squadron]:
        raise NotImplementedError

    def get_valid_qualifications(self, pilot_id: str, as_of: date) -> Sequence[Qualification]:
        """Qualifications with no expiry or expiring on/after `as_of`."""

        raise NotImplementedError
