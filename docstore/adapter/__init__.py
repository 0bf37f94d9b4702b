from .interface import DocumentStoreAdapter
from .native import NativeDocumentStoreAdapter
from .http import HTTPDocumentStoreAdapter


__all__ = [
    "DocumentStoreAdapter",
    "NativeDocumentStoreAdapter",
    "HTTPDocumentStoreAdapter",
]
