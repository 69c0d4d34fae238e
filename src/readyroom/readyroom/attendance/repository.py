from __future__ import annotations

from typing import AbstractSet, Optional, Protocol, Sequence

from .model import RawAttendanceEntry


class AttendanceRepository(Protocol):
    def get_attendance_by_external_message_ids(self, message_ids: AbstractSet[str]) -> Sequence[RawAttendanceEntry]:
        """Roll-call entries posted against any of `message_ids`.

        Only entries carrying a non-null response are returned.
        """

        raise NotImplementedError

    def resolve_pilot_by_external_identity(self, discord_id: str) -> Optional[str]:
        raise NotImplementedError
