"""
This module contains an interface for the definition of adapters to
document store-implementations.
"""

from typing import Optional, Any, Mapping
import abc

from docstore.models import JSONable, PathLike


class DocumentStoreAdapter(metaclass=abc.ABCMeta):
    """
    Interface for adapters to a document store and ranking index.

    Adapters are interchangeable: results use the same sentinels
    (`NOT_FOUND`, `NO_TTL`) and failures raise the same
    `DocumentStoreError`s regardless of the implementation.

    # Implementation guide
    A new `DocumentStoreAdapter`-type has to define all abstract methods
    below. Their semantics follow the methods of the same name in
    `DocumentStore`; ranking-methods (prefix `z`) follow the
    corresponding methods of `RankingIndex`.
    """

    @abc.abstractmethod
    def set(self, key: str, path: PathLike, value: JSONable) -> None:
        """Places `value` at `path` of the document for `key`."""
        raise NotImplementedError(
            f"Class {self.__class__.__name__} does not define method 'set'."
        )

    @abc.abstractmethod
    def get(self, key: str, path: Optional[PathLike] = None) -> Any:
        """Returns the node at `path` or `NOT_FOUND`."""
        raise NotImplementedError(
            f"Class {self.__class__.__name__} does not define method 'get'."
        )

    @abc.abstractmethod
    def delete(self, key: str, path: Optional[PathLike] = None) -> int:
        """Removes the node at `path`. Returns the number of removals."""
        raise NotImplementedError(
            f"Class {self.__class__.__name__} does not define method "
            + "'delete'."
        )

    @abc.abstractmethod
    def numincrby(
        self, key: str, path: PathLike, delta: int | float
    ) -> Any:
        """Adds `delta` to the number at `path`. Returns the new value."""
        raise NotImplementedError(
            f"Class {self.__class__.__name__} does not define method "
            + "'numincrby'."
        )

    @abc.abstractmethod
    def arrappend(self, key: str, path: PathLike, *values: JSONable) -> Any:
        """Appends `values` to the array at `path`. Returns new length."""
        raise NotImplementedError(
            f"Class {self.__class__.__name__} does not define method "
            + "'arrappend'."
        )

    @abc.abstractmethod
    def arrinsert(
        self, key: str, path: PathLike, index: int, *values: JSONable
    ) -> Any:
        """Inserts `values` into the array at `path`. Returns new length."""
        raise NotImplementedError(
            f"Class {self.__class__.__name__} does not define method "
            + "'arrinsert'."
        )

    @abc.abstractmethod
    def arrpop(self, key: str, path: PathLike, index: int = -1) -> Any:
        """Removes and returns an element of the array at `path`."""
        raise NotImplementedError(
            f"Class {self.__class__.__name__} does not define method "
            + "'arrpop'."
        )

    @abc.abstractmethod
    def expire(self, key: str, ttl: int | float) -> Any:
        """Sets the time-to-live of `key`."""
        raise NotImplementedError(
            f"Class {self.__class__.__name__} does not define method "
            + "'expire'."
        )

    @abc.abstractmethod
    def persist(self, key: str) -> Any:
        """Removes the time-to-live of `key`."""
        raise NotImplementedError(
            f"Class {self.__class__.__name__} does not define method "
            + "'persist'."
        )

    @abc.abstractmethod
    def ttl(self, key: str) -> Any:
        """Returns the remaining time-to-live of `key`."""
        raise NotImplementedError(
            f"Class {self.__class__.__name__} does not define method 'ttl'."
        )

    @abc.abstractmethod
    def version(self, key: str) -> Optional[int]:
        """Returns the current version of `key`."""
        raise NotImplementedError(
            f"Class {self.__class__.__name__} does not define method "
            + "'version'."
        )

    @abc.abstractmethod
    def keys(self) -> tuple[str, ...]:
        """Returns a tuple of present keys."""
        raise NotImplementedError(
            f"Class {self.__class__.__name__} does not define method 'keys'."
        )

    @abc.abstractmethod
    def commit(
        self,
        watched: Mapping[str, Optional[int]],
        operations: list[Mapping[str, Any]],
    ) -> list[Any]:
        """
        Applies JSON-encoded `operations` (see `docstore.operations`) if
        no key in `watched` deviates from the given version. Returns the
        list of results or raises `ConflictError`.
        """
        raise NotImplementedError(
            f"Class {self.__class__.__name__} does not define method "
            + "'commit'."
        )

    @abc.abstractmethod
    def zincrby(self, member: str, delta: int | float) -> int | float:
        """Adds `delta` to the score of `member`. Returns the new score."""
        raise NotImplementedError(
            f"Class {self.__class__.__name__} does not define method "
            + "'zincrby'."
        )

    @abc.abstractmethod
    def zscore(self, member: str) -> Any:
        """Returns the score of `member` or `NOT_FOUND`."""
        raise NotImplementedError(
            f"Class {self.__class__.__name__} does not define method "
            + "'zscore'."
        )

    @abc.abstractmethod
    def zrank(self, member: str, descending: bool = True) -> Any:
        """Returns the rank of `member` or `NOT_FOUND`."""
        raise NotImplementedError(
            f"Class {self.__class__.__name__} does not define method "
            + "'zrank'."
        )

    @abc.abstractmethod
    def zrange(
        self, start: int, end: int, descending: bool = True
    ) -> list[tuple[str, int | float]]:
        """Returns `(member, score)`-entries in the rank-window."""
        raise NotImplementedError(
            f"Class {self.__class__.__name__} does not define method "
            + "'zrange'."
        )

    @abc.abstractmethod
    def zrem(self, member: str) -> bool:
        """Removes `member`. Returns `True` if it was present."""
        raise NotImplementedError(
            f"Class {self.__class__.__name__} does not define method "
            + "'zrem'."
        )
