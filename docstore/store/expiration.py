"""
This module contains the expiration manager that tracks key deadlines.
"""

from typing import Optional, Callable
from threading import Lock
from time import time
import heapq

from .record import KeyRecord, ExpirationState


class ExpirationManager:
    """
    Tracks deadlines of `KeyRecord`s.

    Deadlines are stored on the records themselves (lazy checks on
    access) and additionally in a min-heap of `(deadline, key)`-entries
    that feeds the proactive sweep. Heap entries whose deadline no
    longer matches the record are stale and skipped by the caller.
    Once stale entries outnumber the live deadlines (and the heap holds
    more than `COMPACT_THRESHOLD` entries), the heap is rebuilt from the
    live deadlines.

    Keyword arguments:
    clock -- callable returning the current time in seconds
             (default `time.time`)
    """

    COMPACT_THRESHOLD = 64

    def __init__(self, clock: Optional[Callable[[], float]] = None) -> None:
        self.clock = clock or time
        self._heap: list[tuple[float, str]] = []
        self._deadlines: dict[str, float] = {}
        self._lock = Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._heap)

    def now(self) -> float:
        """Returns the current time."""
        return self.clock()

    def _compact(self) -> None:
        # caller holds self._lock
        if (
            len(self._heap) <= self.COMPACT_THRESHOLD
            or len(self._heap) <= 2 * len(self._deadlines)
        ):
            return
        self._heap = [
            (deadline, key) for key, deadline in self._deadlines.items()
        ]
        heapq.heapify(self._heap)

    def track(self, key: str, deadline: float) -> None:
        """Registers `deadline` as the live deadline of `key`."""
        with self._lock:
            self._deadlines[key] = deadline
            heapq.heappush(self._heap, (deadline, key))
            self._compact()

    def forget(self, key: str) -> None:
        """Drops the live deadline of `key` (if any)."""
        with self._lock:
            if self._deadlines.pop(key, None) is not None:
                self._compact()

    def schedule(self, record: KeyRecord, ttl: float) -> float:
        """Sets the deadline of `record` to now + `ttl`. Returns it."""
        record.expires_at = self.now() + ttl
        self.track(record.key, record.expires_at)
        return record.expires_at

    def clear(self, record: KeyRecord) -> bool:
        """
        Removes the deadline of `record`. Returns `True` if there was
        one.
        """
        had_deadline = record.expires_at is not None
        record.expires_at = None
        self.forget(record.key)
        return had_deadline

    def state(self, record: KeyRecord) -> ExpirationState:
        """Returns the current `ExpirationState` of `record`."""
        return record.state(self.now())

    def is_expired(self, record: KeyRecord) -> bool:
        """Returns `True` if the deadline of `record` has passed."""
        return self.state(record) is ExpirationState.EXPIRED

    def remaining(self, record: KeyRecord) -> Optional[float]:
        """
        Returns the remaining seconds until `record` expires (never
        negative) or `None` if it has no deadline.
        """
        if record.expires_at is None:
            return None
        return max(record.expires_at - self.now(), 0.0)

    def due(self, limit: Optional[int] = None) -> list[tuple[float, str]]:
        """
        Removes and returns up to `limit` heap-entries whose deadline
        has passed, earliest first.
        """
        now = self.now()
        entries = []
        with self._lock:
            while self._heap and self._heap[0][0] < now:
                if limit is not None and len(entries) >= limit:
                    break
                entries.append(heapq.heappop(self._heap))
        return entries
