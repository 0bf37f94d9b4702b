from .errors import (
    DocumentStoreError, PathSyntaxError, PathTypeError, PathIndexError,
    TypeMismatchError, EmptyContainerError, ConflictError, KeyTypeError,
)
from .models import Path, NOT_FOUND, NO_TTL
from .store import DocumentStore, Transaction, RankingIndex
from .daemon import Daemon, ExpirationDaemon


__all__ = [
    "DocumentStoreError", "PathSyntaxError", "PathTypeError",
    "PathIndexError", "TypeMismatchError", "EmptyContainerError",
    "ConflictError", "KeyTypeError",
    "Path", "NOT_FOUND", "NO_TTL",
    "DocumentStore", "Transaction", "RankingIndex",
    "Daemon", "ExpirationDaemon",
]
