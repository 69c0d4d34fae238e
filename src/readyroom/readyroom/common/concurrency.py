from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from typing import Callable, Iterable, Optional, Sequence, TypeVar

from ..core.deadline import Deadline
from ..core.exceptions import DeadlineExceeded

T = TypeVar("T")
R = TypeVar("R")

logger = logging.getLogger(__name__)


class QueryRunner:
    """Runs data-access calls on a worker pool, each bounded by a timeout.

    A runner belongs to exactly one report run. Results of `map_each` come
    back in input order, so callers decide the final ordering themselves.
    """

    def __init__(
        self,
        *,
        deadline: Optional[Deadline] = None,
        max_workers: int = 8,
        query_timeout: Optional[float] = None,
    ):
        self.deadline = deadline or Deadline.unbounded()
        self._query_timeout = query_timeout
        self._pool = ThreadPoolExecutor(max_workers=max(1, int(max_workers)), thread_name_prefix="readyroom-query")

    def __enter__(self) -> "QueryRunner":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        # Hung queries keep their thread; we just stop waiting on them.
        self._pool.shutdown(wait=False, cancel_futures=True)

    def _wait(self, future: Future, label: str):
        try:
            return future.result(timeout=self.deadline.timeout_for(self._query_timeout))
        except FutureTimeout as exc:
            future.cancel()
            raise DeadlineExceeded(f"Query timed out: {label}") from exc

    def call(self, fn: Callable[..., R], *args, **kwargs) -> R:
        self.deadline.check()
        label = getattr(fn, "__name__", repr(fn))
        return self._wait(self._pool.submit(fn, *args, **kwargs), label)

    def map_each(
        self, fn: Callable[[T], R], items: Iterable[T]
    ) -> Sequence[tuple[T, Optional[R], Optional[BaseException]]]:
        """Apply `fn` to every item concurrently.

        Returns `(item, result, error)` per item. Ordinary exceptions are
        captured per item so one failed lookup does not sink its siblings;
        deadline and cancellation still abort the whole batch.
        """

        self.deadline.check()
        items = list(items)
        label = getattr(fn, "__name__", repr(fn))
        futures = [self._pool.submit(fn, item) for item in items]

        out: list[tuple[T, Optional[R], Optional[BaseException]]] = []
        for item, future in zip(items, futures):
            self.deadline.check()
            try:
                out.append((item, self._wait(future, label), None))
            except DeadlineExceeded:
                for pending in futures:
                    pending.cancel()
                raise
            except Exception as exc:
                out.append((item, None, exc))
        return out
