"""
This module contains the per-key locking used to serialize mutations on
a single key while keeping operations on different keys independent.
"""

from typing import Iterable
from threading import Condition, Lock
from contextlib import contextmanager, ExitStack


class ReadWriteLock:
    """
    Readers-writer lock: any number of concurrent readers or a single
    writer. Waiting writers block new readers (no writer starvation).
    The lock is not reentrant.
    """

    def __init__(self) -> None:
        self._condition = Condition(Lock())
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    def acquire_read(self) -> None:
        """Blocks until shared access is granted."""
        with self._condition:
            while self._writer or self._waiting_writers:
                self._condition.wait()
            self._readers += 1

    def release_read(self) -> None:
        """Releases shared access."""
        with self._condition:
            self._readers -= 1
            if self._readers == 0:
                self._condition.notify_all()

    def acquire_write(self) -> None:
        """Blocks until exclusive access is granted."""
        with self._condition:
            self._waiting_writers += 1
            try:
                while self._writer or self._readers:
                    self._condition.wait()
            finally:
                self._waiting_writers -= 1
            self._writer = True

    def release_write(self) -> None:
        """Releases exclusive access."""
        with self._condition:
            self._writer = False
            self._condition.notify_all()


class KeyLockRegistry:
    """
    Registry of `ReadWriteLock`s by key.

    Locks are created on demand and dropped as soon as no caller holds
    or waits for them. Multi-key acquisition happens in sorted key
    order.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._locks: dict[str, tuple[ReadWriteLock, int]] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._locks)

    def _checkout(self, key: str) -> ReadWriteLock:
        with self._lock:
            lock, users = self._locks.get(key, (None, 0))
            if lock is None:
                lock = ReadWriteLock()
            self._locks[key] = (lock, users + 1)
            return lock

    def _checkin(self, key: str) -> None:
        with self._lock:
            lock, users = self._locks[key]
            if users == 1:
                del self._locks[key]
            else:
                self._locks[key] = (lock, users - 1)

    @contextmanager
    def read(self, key: str):
        """Context manager for shared access to `key`."""
        lock = self._checkout(key)
        try:
            lock.acquire_read()
            try:
                yield
            finally:
                lock.release_read()
        finally:
            self._checkin(key)

    @contextmanager
    def write(self, key: str):
        """Context manager for exclusive access to `key`."""
        lock = self._checkout(key)
        try:
            lock.acquire_write()
            try:
                yield
            finally:
                lock.release_write()
        finally:
            self._checkin(key)

    @contextmanager
    def write_many(self, keys: Iterable[str]):
        """
        Context manager for exclusive access to all `keys` (acquired in
        sorted order).
        """
        with ExitStack() as stack:
            for key in sorted(set(keys)):
                stack.enter_context(self.write(key))
            yield
