"""
This module contains a definition for a document store-adapter that
operates purely in native python.
"""

from typing import Optional

from docstore.operations import stage
from docstore.store import DocumentStore, RankingIndex, Transaction
from .interface import DocumentStoreAdapter


class NativeDocumentStoreAdapter(DocumentStoreAdapter):
    """
    Implementation of a `DocumentStoreAdapter` working in native python
    on in-process instances.

    Keyword arguments:
    store -- `DocumentStore`-instance
             (default None; creates a new instance)
    ranking -- `RankingIndex`-instance
               (default None; creates a new instance)
    """

    def __init__(
        self,
        store: Optional[DocumentStore] = None,
        ranking: Optional[RankingIndex] = None,
    ) -> None:
        self._store = DocumentStore() if store is None else store
        self._ranking = RankingIndex() if ranking is None else ranking

    @property
    def store(self) -> DocumentStore:
        """Returns the underlying `DocumentStore`."""
        return self._store

    @property
    def ranking(self) -> RankingIndex:
        """Returns the underlying `RankingIndex`."""
        return self._ranking

    def set(self, key, path, value):
        self._store.set(key, path, value)

    def get(self, key, path=None):
        return self._store.get(key, path)

    def delete(self, key, path=None):
        return self._store.delete(key, path)

    def numincrby(self, key, path, delta):
        return self._store.numincrby(key, path, delta)

    def arrappend(self, key, path, *values):
        return self._store.arrappend(key, path, *values)

    def arrinsert(self, key, path, index, *values):
        return self._store.arrinsert(key, path, index, *values)

    def arrpop(self, key, path, index=-1):
        return self._store.arrpop(key, path, index)

    def expire(self, key, ttl):
        return self._store.expire(key, ttl)

    def persist(self, key):
        return self._store.persist(key)

    def ttl(self, key):
        return self._store.ttl(key)

    def version(self, key):
        return self._store.version(key)

    def keys(self):
        return self._store.keys()

    def commit(self, watched, operations):
        transaction = Transaction(self._store, watched)
        for operation in operations:
            stage(transaction, operation)
        return transaction.commit()

    def zincrby(self, member, delta):
        return self._ranking.incrby(member, delta)

    def zscore(self, member):
        return self._ranking.score(member)

    def zrank(self, member, descending=True):
        return self._ranking.rank(member, descending)

    def zrange(self, start, end, descending=True):
        return self._ranking.range_by_rank(start, end, descending)

    def zrem(self, member):
        return self._ranking.remove(member)
