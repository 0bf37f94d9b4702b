"""
This module contains the ranking index, a sorted set of members by
numeric score.
"""

from typing import Any, Optional
from threading import RLock
from math import isfinite

from sortedcontainers import SortedList

from docstore.errors import TypeMismatchError
from docstore.models import is_number, NOT_FOUND


class RankingIndex:
    """
    Sorted set of (member, score)-entries for leaderboard-style
    workloads.

    Entries are kept in two `SortedList`s, ascending by `(score,
    member)` and descending by score (`(-score, member)`). Updates,
    ranks and score lookups are O(log n); a range additionally costs
    O(k) for k returned entries. Equal scores
    are ordered by member ascending in both directions. Each member
    appears at most once; updating a member re-sorts it.

    Ranks are 0-based. The index is safe for concurrent use.
    """

    def __init__(self) -> None:
        self._scores: dict[str, int | float] = {}
        self._ascending = SortedList()
        self._descending = SortedList()
        self._lock = RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._scores)

    def __contains__(self, member: str) -> bool:
        with self._lock:
            return member in self._scores

    @staticmethod
    def _validate(member: str, value: Any, what: str) -> None:
        if not isinstance(member, str):
            raise TypeMismatchError(
                "Member needs to be a string but got "
                + f"'{member.__class__.__name__}'."
            )
        if not is_number(value) or not isfinite(value):
            raise TypeMismatchError(
                f"{what} needs to be a finite number but got "
                + f"'{value!r}'."
            )

    def _unlink(self, member: str) -> None:
        score = self._scores.pop(member)
        self._ascending.remove((score, member))
        self._descending.remove((-score, member))

    def _link(self, member: str, score: int | float) -> None:
        self._scores[member] = score
        self._ascending.add((score, member))
        self._descending.add((-score, member))

    def add(self, member: str, score: int | float) -> None:
        """Sets the score of `member` (replaces an existing score)."""
        self._validate(member, score, "Score")
        with self._lock:
            if member in self._scores:
                self._unlink(member)
            self._link(member, score)

    def incrby(self, member: str, delta: int | float) -> int | float:
        """
        Adds `delta` to the score of `member` (a new member starts at
        `delta`). Returns the new score.
        """
        self._validate(member, delta, "Increment")
        with self._lock:
            score = self._scores.get(member, 0) + delta
            if isinstance(score, float) and not isfinite(score):
                raise TypeMismatchError(
                    f"Incrementing '{member}' by {delta!r} leaves the "
                    + "range of finite numbers."
                )
            if member in self._scores:
                self._unlink(member)
            self._link(member, score)
            return score

    def remove(self, member: str) -> bool:
        """Removes `member`. Returns `True` if it was present."""
        with self._lock:
            if member not in self._scores:
                return False
            self._unlink(member)
            return True

    def score(self, member: str) -> Any:
        """Returns the score of `member` or `NOT_FOUND`."""
        with self._lock:
            return self._scores.get(member, NOT_FOUND)

    def rank(self, member: str, descending: bool = True) -> Any:
        """
        Returns the 0-based rank of `member` or `NOT_FOUND`.

        Keyword arguments:
        member -- member identifier
        descending -- if `True`, the highest score has rank 0
                      (default True)
        """
        with self._lock:
            if member not in self._scores:
                return NOT_FOUND
            score = self._scores[member]
            if descending:
                return self._descending.bisect_left((-score, member))
            return self._ascending.bisect_left((score, member))

    def range_by_rank(
        self, start: int, end: int, descending: bool = True
    ) -> list[tuple[str, int | float]]:
        """
        Returns the `(member, score)`-entries with ranks from `start` to
        `end` (both inclusive).

        Negative ranks count from the end (-1 being the last rank). A
        window that partially overlaps the valid ranks is clamped, a
        window outside of the valid ranks yields an empty list.

        Keyword arguments:
        start -- first rank
        end -- last rank
        descending -- if `True`, the highest score has rank 0
                      (default True)
        """
        with self._lock:
            size = len(self._scores)
            if start < 0:
                start += size
            if end < 0:
                end += size
            start = max(start, 0)
            end = min(end, size - 1)
            if start > end:
                return []
            if descending:
                return [
                    (member, self._scores[member])
                    for _, member in self._descending.islice(start, end + 1)
                ]
            return [
                (member, score)
                for score, member in self._ascending.islice(start, end + 1)
            ]

    def range_by_score(
        self,
        minimum: Optional[int | float] = None,
        maximum: Optional[int | float] = None,
        descending: bool = False,
    ) -> list[tuple[str, int | float]]:
        """
        Returns the `(member, score)`-entries with `minimum <= score <=
        maximum`; `None` leaves the respective bound open.
        """
        with self._lock:
            # `(x,)` sorts before every `(x, member)`
            low = (
                0 if minimum is None
                else self._ascending.bisect_left((minimum,))
            )
            high = (
                len(self._ascending) if maximum is None
                else len(self._ascending)
                - self._descending.bisect_left((-maximum,))
            )
            entries = [
                (member, score)
                for score, member in self._ascending.islice(low, high)
            ]
        if descending:
            entries.sort(key=lambda entry: (-entry[1], entry[0]))
        return entries
