from .record import KeyRecord, ExpirationState
from .locks import ReadWriteLock, KeyLockRegistry
from .expiration import ExpirationManager
from .document_store import DocumentStore, Transaction
from .ranking import RankingIndex


__all__ = [
    "KeyRecord",
    "ExpirationState",
    "ReadWriteLock",
    "KeyLockRegistry",
    "ExpirationManager",
    "DocumentStore",
    "Transaction",
    "RankingIndex",
]
