"""
This module contains the definition of the in-memory document store.
"""

from typing import Optional, Callable, Any, Mapping
from threading import Lock
from itertools import count
from math import isfinite

from docstore.errors import TypeMismatchError, ConflictError
from docstore.logging import Logging
from docstore.util import qjoin
from docstore.models import (
    JSONable, NodeKind, kind_of, is_number, clone, PathLike, as_path,
    NOT_FOUND, NO_TTL,
)
from .record import KeyRecord
from .locks import KeyLockRegistry
from .expiration import ExpirationManager
from .resolver import resolve, locate, remove, empty_root_for
from .mutations import (
    set_node, incr_node, append_node, insert_node, pop_node, clone_all
)


class DocumentStore:
    """
    In-memory mapping of string keys to JSON-documents with
    path-addressable, atomic partial updates.

    Notable properties:
    * values are copied on the way in and out (no aliasing of stored
      documents),
    * absent (or expired) keys and unresolvable paths are reported
      with the `NOT_FOUND`-sentinel instead of an exception,
    * operations on a single key are serialized by a per-key
      readers-writer lock; reads run concurrently with each other but
      never with a mutation of the same key,
    * a failing operation leaves the document unchanged.

    Paths can be given as `Path`, in their textual form (e.g.
    `"$.a.b[0]"`), or as sequence of steps; `None` addresses the root.

    Keyword arguments:
    clock -- callable returning the current time in seconds; ignored if
             `expiration` is given
             (default None; uses `time.time`)
    expiration -- `ExpirationManager` to be used
                  (default None; creates a new instance)
    """

    def __init__(
        self,
        clock: Optional[Callable[[], float]] = None,
        expiration: Optional[ExpirationManager] = None,
    ) -> None:
        self._expiration = (
            ExpirationManager(clock) if expiration is None else expiration
        )
        self._records: dict[str, KeyRecord] = {}
        self._index_lock = Lock()
        self._locks = KeyLockRegistry()
        self._versions = count(1)

    @property
    def expiration(self) -> ExpirationManager:
        """Returns the store's `ExpirationManager`."""
        return self._expiration

    # record-helpers; callers hold the key's lock
    def _peek(self, key: str) -> Optional[KeyRecord]:
        record = self._records.get(key)
        if record is None or self._expiration.is_expired(record):
            return None
        return record

    def _live(self, key: str) -> Optional[KeyRecord]:
        record = self._records.get(key)
        if record is not None and self._expiration.is_expired(record):
            self._drop(key)
            Logging.debug(f"Purged expired key '{key}' on access.")
            return None
        return record

    def _drop(self, key: str) -> None:
        with self._index_lock:
            del self._records[key]
        self._expiration.forget(key)

    def _put(self, record: KeyRecord) -> None:
        with self._index_lock:
            self._records[record.key] = record

    def _touch(self, record: KeyRecord) -> None:
        record.version = next(self._versions)

    # unlocked operations; callers hold the key's lock
    def _set(self, key, path, value) -> None:
        record = self._live(key)
        if record is None:
            root = None if path.is_root else empty_root_for(path)
            self._put(
                KeyRecord(
                    key, set_node(root, path, value), next(self._versions)
                )
            )
            return
        record.document = set_node(record.document, path, value)
        self._touch(record)

    def _get(self, key, path) -> Any:
        record = self._peek(key)
        if record is None:
            return NOT_FOUND
        node = resolve(record.document, path)
        if node is NOT_FOUND:
            return NOT_FOUND
        return clone(node)

    def _delete(self, key, path) -> int:
        record = self._live(key)
        if record is None:
            return 0
        if path.is_root:
            self._drop(key)
            return 1
        removed = remove(record.document, path)
        if removed:
            self._touch(record)
        return removed

    def _numincrby(self, key, path, delta) -> Any:
        record = self._live(key)
        if record is None:
            return NOT_FOUND
        if path.is_root:
            record.document = incr_node(record.document, delta)
            self._touch(record)
            return record.document
        slot = locate(record.document, path)
        if slot is NOT_FOUND:
            return NOT_FOUND
        value = incr_node(slot.value, delta)
        slot.replace(value)
        self._touch(record)
        return value

    def _update_node(self, key, path, verb: Callable[[JSONable], Any]):
        record = self._live(key)
        if record is None:
            return NOT_FOUND
        node = resolve(record.document, path)
        if node is NOT_FOUND:
            return NOT_FOUND
        result = verb(node)
        self._touch(record)
        return result

    def _arrappend(self, key, path, values) -> Any:
        return self._update_node(
            key, path, lambda node: append_node(node, values)
        )

    def _arrinsert(self, key, path, index, values) -> Any:
        return self._update_node(
            key, path, lambda node: insert_node(node, index, values)
        )

    def _arrpop(self, key, path, index) -> Any:
        return self._update_node(
            key, path, lambda node: pop_node(node, index)
        )

    def _expire(self, key, ttl) -> Any:
        if not is_number(ttl) or not isfinite(ttl):
            raise TypeMismatchError(
                f"TTL needs to be a finite number but got '{ttl!r}'."
            )
        record = self._live(key)
        if record is None:
            return NOT_FOUND
        if ttl <= 0:
            self._drop(key)
            Logging.debug(f"Expired key '{key}' by non-positive TTL.")
            return True
        self._expiration.schedule(record, ttl)
        self._touch(record)
        return True

    def _persist(self, key) -> Any:
        record = self._live(key)
        if record is None:
            return NOT_FOUND
        if self._expiration.clear(record):
            self._touch(record)
        return True

    def _version(self, key) -> Optional[int]:
        record = self._peek(key)
        if record is None:
            return None
        return record.version

    # public interface
    def set(self, key: str, path: PathLike, value: JSONable) -> None:
        """
        Places a copy of `value` at `path` of the document for `key`.
        The root path replaces the whole document. Missing intermediate
        containers are created on the fly (also for absent keys).

        Raises
        * `KeyTypeError` if an existing scalar sits where a container is
          required,
        * `PathTypeError` if a step does not match the container kind,
        * `PathIndexError` for negative indices before the start of a
          sequence,
        * `TypeMismatchError` (a `TypeError`) if `value` is not a
          document node.
        """
        path = as_path(path)
        with self._locks.write(key):
            self._set(key, path, value)

    def get(self, key: str, path: Optional[PathLike] = None) -> Any:
        """
        Returns a copy of the node at `path` of the document for `key`
        or `NOT_FOUND`.
        """
        path = as_path(path)
        with self._locks.read(key):
            return self._get(key, path)

    def delete(self, key: str, path: Optional[PathLike] = None) -> int:
        """
        Removes the node at `path`; the root path removes the key.
        Returns the number of removed nodes (0 if nothing resolved).
        """
        path = as_path(path)
        with self._locks.write(key):
            return self._delete(key, path)

    def numincrby(
        self, key: str, path: PathLike, delta: int | float
    ) -> Any:
        """
        Adds `delta` to the number at `path`. Returns the new value or
        `NOT_FOUND`.

        Raises `TypeMismatchError` if node or `delta` are not numeric.
        """
        path = as_path(path)
        with self._locks.write(key):
            return self._numincrby(key, path, delta)

    def arrappend(self, key: str, path: PathLike, *values: JSONable) -> Any:
        """
        Appends `values` to the array at `path`. Returns the new length
        or `NOT_FOUND`.
        """
        path = as_path(path)
        with self._locks.write(key):
            return self._arrappend(key, path, values)

    def arrinsert(
        self, key: str, path: PathLike, index: int, *values: JSONable
    ) -> Any:
        """
        Inserts `values` before `index` into the array at `path`.
        Returns the new length or `NOT_FOUND`.

        Out-of-range indices are clamped: positions before the start
        insert at the front, positions past the end append.
        """
        path = as_path(path)
        with self._locks.write(key):
            return self._arrinsert(key, path, index, values)

    def arrpop(self, key: str, path: PathLike, index: int = -1) -> Any:
        """
        Removes and returns the element at `index` of the array at
        `path` (clamped to the first/last element) or `NOT_FOUND`.

        Raises `EmptyContainerError` if the array is empty.
        """
        path = as_path(path)
        with self._locks.write(key):
            return self._arrpop(key, path, index)

    def expire(self, key: str, ttl: int | float) -> Any:
        """
        Sets the time-to-live of `key` to `ttl` seconds from now.
        Returns `True` or `NOT_FOUND`. A non-positive `ttl` removes the
        key immediately.
        """
        with self._locks.write(key):
            return self._expire(key, ttl)

    def persist(self, key: str) -> Any:
        """
        Removes the time-to-live of `key`. Returns `True` or
        `NOT_FOUND`.
        """
        with self._locks.write(key):
            return self._persist(key)

    def ttl(self, key: str) -> Any:
        """
        Returns the remaining time-to-live of `key` in seconds, `NO_TTL`
        or `NOT_FOUND`.
        """
        with self._locks.read(key):
            record = self._peek(key)
            if record is None:
                return NOT_FOUND
            remaining = self._expiration.remaining(record)
        if remaining is None:
            return NO_TTL
        return remaining

    def version(self, key: str) -> Optional[int]:
        """Returns the current version of `key` or `None` if absent."""
        with self._locks.read(key):
            return self._version(key)

    def exists(self, key: str) -> bool:
        """Returns `True` if `key` is present and not expired."""
        with self._locks.read(key):
            return self._peek(key) is not None

    def __contains__(self, key: str) -> bool:
        return self.exists(key)

    def keys(self) -> tuple[str, ...]:
        """Returns a tuple of the present keys."""
        with self._index_lock:
            records = list(self._records.values())
        return tuple(
            record.key for record in records
            if not self._expiration.is_expired(record)
        )

    def __len__(self) -> int:
        return len(self.keys())

    def type_of(self, key: str, path: Optional[PathLike] = None) -> Any:
        """
        Returns the kind of the node at `path` (one of "null",
        "boolean", "number", "string", "array", "object") or
        `NOT_FOUND`.
        """
        path = as_path(path)
        with self._locks.read(key):
            record = self._peek(key)
            if record is None:
                return NOT_FOUND
            node = resolve(record.document, path)
            if node is NOT_FOUND:
                return NOT_FOUND
            return kind_of(node).value

    def arrlen(self, key: str, path: Optional[PathLike] = None) -> Any:
        """
        Returns the length of the array at `path` or `NOT_FOUND`.

        Raises `TypeMismatchError` if the node is not an array.
        """
        return self._inspect(key, path, NodeKind.SEQUENCE, len)

    def objkeys(self, key: str, path: Optional[PathLike] = None) -> Any:
        """
        Returns the list of field names of the object at `path` or
        `NOT_FOUND`.

        Raises `TypeMismatchError` if the node is not an object.
        """
        return self._inspect(
            key, path, NodeKind.MAPPING, lambda node: list(node.keys())
        )

    def _inspect(
        self, key, path, kind: NodeKind, view: Callable[[JSONable], Any]
    ) -> Any:
        path = as_path(path)
        with self._locks.read(key):
            record = self._peek(key)
            if record is None:
                return NOT_FOUND
            node = resolve(record.document, path)
            if node is NOT_FOUND:
                return NOT_FOUND
            if kind_of(node) is not kind:
                raise TypeMismatchError(
                    f"Expected {kind.value} at '{path}' but found "
                    + f"{kind_of(node).value}."
                )
            return view(node)

    def purge_expired(self, limit: Optional[int] = None) -> int:
        """
        Physically removes keys whose deadline has passed. Returns the
        number of removed keys.

        Keyword arguments:
        limit -- maximum number of deadlines processed
                 (default None; no limit)
        """
        purged = 0
        for deadline, key in self._expiration.due(limit):
            with self._locks.write(key):
                record = self._records.get(key)
                if (
                    record is None
                    or record.expires_at != deadline
                    or not self._expiration.is_expired(record)
                ):
                    continue
                self._drop(key)
                purged += 1
        if purged:
            Logging.debug(f"Purged {purged} expired key(s).")
        return purged

    def flush(self) -> None:
        """Removes all keys."""
        with self._index_lock:
            keys = list(self._records.keys())
        with self._locks.write_many(keys):
            with self._index_lock:
                self._records.clear()
            for key in keys:
                self._expiration.forget(key)

    def watch(self, *keys: str) -> "Transaction":
        """
        Returns a new `Transaction` watching the current versions of
        `keys` (watch-then-commit).
        """
        return Transaction(self, {key: self.version(key) for key in keys})

    def _commit(
        self,
        watched: Mapping[str, Optional[int]],
        staged: list[tuple[Callable, str, tuple]],
    ) -> list[Any]:
        """
        Applies `staged` operations if no `watched` key changed its
        version. On failure of any operation, all touched records are
        restored before the error propagates.
        """
        keys = set(watched) | {key for _, key, _ in staged}
        with self._locks.write_many(keys):
            stale = sorted(
                key for key, version in watched.items()
                if self._version(key) != version
            )
            if stale:
                Logging.info(
                    "Rejected transaction due to modified key(s) "
                    + f"{qjoin(stale)}."
                )
                raise ConflictError(
                    f"Watched key(s) modified since watch: {qjoin(stale)}.",
                    stale,
                )
            backup = {
                key: (
                    None if (record := self._records.get(key)) is None
                    else record.snapshot()
                )
                for _, key, _ in staged
            }
            results = []
            try:
                for operation, key, args in staged:
                    results.append(operation(key, *args))
            except Exception:  # pylint: disable=broad-exception-caught
                self._restore(backup)
                raise
            return results

    def _restore(self, backup: Mapping[str, Optional[KeyRecord]]) -> None:
        with self._index_lock:
            for key, record in backup.items():
                if record is None:
                    self._records.pop(key, None)
                else:
                    self._records[key] = record
        for key, record in backup.items():
            if record is None or record.expires_at is None:
                self._expiration.forget(key)
            else:
                self._expiration.track(key, record.expires_at)


class Transaction:
    """
    Optimistic watch-then-commit transaction on a `DocumentStore`.

    Operations are staged and only applied by `commit`, which fails
    with `ConflictError` if any watched key has been modified since it
    was watched. A transaction can be committed (or discarded) once.
    Discarding (also on leaving a `with`-block without commit) drops
    all staged operations.

    Keyword arguments:
    store -- the `DocumentStore`
    watched -- mapping of watched keys to their expected versions
               (`None` for absent keys)
    """

    def __init__(
        self,
        store: DocumentStore,
        watched: Optional[Mapping[str, Optional[int]]] = None,
    ) -> None:
        self._store = store
        self._watched = dict(watched or {})
        self._staged: list[tuple[Callable, str, tuple]] = []
        self._open = True

    def __enter__(self) -> "Transaction":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        if self._open:
            self.discard()

    @property
    def watched(self) -> dict[str, Optional[int]]:
        """Returns a copy of the watched versions."""
        return self._watched.copy()

    @property
    def is_open(self) -> bool:
        """Returns `True` if neither committed nor discarded."""
        return self._open

    def __len__(self) -> int:
        return len(self._staged)

    def _ensure_open(self) -> None:
        if not self._open:
            raise RuntimeError("Transaction is already closed.")

    def _stage(self, operation: Callable, key: str, *args) -> "Transaction":
        self._ensure_open()
        self._staged.append((operation, key, args))
        return self

    def watch(self, *keys: str) -> "Transaction":
        """Adds `keys` with their current versions to the watch list."""
        self._ensure_open()
        for key in keys:
            self._watched[key] = self._store.version(key)
        return self

    def get(self, key: str, path: Optional[PathLike] = None) -> Any:
        """Reads through to the store (see `DocumentStore.get`)."""
        return self._store.get(key, path)

    def set(self, key: str, path: PathLike, value: JSONable):
        """Stages `DocumentStore.set`."""
        return self._stage(
            self._store._set, key, as_path(path), clone_all([value])[0]
        )

    def delete(self, key: str, path: Optional[PathLike] = None):
        """Stages `DocumentStore.delete`."""
        return self._stage(self._store._delete, key, as_path(path))

    def numincrby(self, key: str, path: PathLike, delta: int | float):
        """Stages `DocumentStore.numincrby`."""
        return self._stage(
            self._store._numincrby, key, as_path(path), delta
        )

    def arrappend(self, key: str, path: PathLike, *values: JSONable):
        """Stages `DocumentStore.arrappend`."""
        return self._stage(
            self._store._arrappend, key, as_path(path),
            tuple(clone_all(values)),
        )

    def arrinsert(
        self, key: str, path: PathLike, index: int, *values: JSONable
    ):
        """Stages `DocumentStore.arrinsert`."""
        return self._stage(
            self._store._arrinsert, key, as_path(path), index,
            tuple(clone_all(values)),
        )

    def arrpop(self, key: str, path: PathLike, index: int = -1):
        """Stages `DocumentStore.arrpop`."""
        return self._stage(self._store._arrpop, key, as_path(path), index)

    def expire(self, key: str, ttl: int | float):
        """Stages `DocumentStore.expire`."""
        return self._stage(self._store._expire, key, ttl)

    def persist(self, key: str):
        """Stages `DocumentStore.persist`."""
        return self._stage(self._store._persist, key)

    def commit(self) -> list[Any]:
        """
        Applies all staged operations atomically and returns their
        results in order.

        Raises `ConflictError` if a watched key has changed; the caller
        is expected to retry with a new transaction.
        """
        self._ensure_open()
        self._open = False
        return self._store._commit(self._watched, self._staged)

    def discard(self) -> None:
        """Drops all staged operations."""
        self._ensure_open()
        self._open = False
        self._staged.clear()
