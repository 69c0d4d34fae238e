from __future__ import annotations

import threading
import time
from typing import Optional

from .exceptions import DeadlineExceeded, ReportCancelled


class Deadline:
    """Per-invocation cancellation and time budget.

    One instance is created per report run and threaded through every stage.
    `check()` is called between stages and between per-entity lookups.
    """

    def __init__(self, seconds: Optional[float] = None, *, clock=time.monotonic):
        self._clock = clock
        self._expires_at = clock() + seconds if seconds is not None else None
        self._cancelled = threading.Event()

    @classmethod
    def unbounded(cls) -> "Deadline":
        return cls(None)

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def remaining(self) -> Optional[float]:
        if self._expires_at is None:
            return None
        return max(0.0, self._expires_at - self._clock())

    def timeout_for(self, per_call: Optional[float]) -> Optional[float]:
        """Smallest of the per-call timeout and the remaining budget."""

        remaining = self.remaining()
        if remaining is None:
            return per_call
        if per_call is None:
            return remaining
        return min(per_call, remaining)

    def check(self) -> None:
        if self.cancelled:
            raise ReportCancelled("Report generation was cancelled")
        remaining = self.remaining()
        if remaining is not None and remaining <= 0:
            raise DeadlineExceeded("Report generation exceeded its deadline")
