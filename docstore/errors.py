"""
This module contains the error taxonomy of the `docstore`-package.

Note that an absent key or path is not an error; such results are
signaled by the `NOT_FOUND`-sentinel (see `docstore.models.result`).
"""

from typing import Optional


class DocumentStoreError(Exception):
    """
    Base class for errors raised by `docstore`-operations.

    All errors are recoverable by the caller; a failed mutating
    operation never leaves a document or ranking index partially
    modified.
    """

    @property
    def json(self):
        """Returns error as JSONable."""
        return {
            "error": self.__class__.__name__,
            "message": str(self),
        }

    @classmethod
    def from_json(cls, json) -> "DocumentStoreError":
        """
        Returns error instance created from given JSON. Unknown error
        names are mapped onto the base class.
        """
        error = ERRORS.get(json.get("error"), cls)
        if issubclass(error, ConflictError):
            return error(json.get("message", ""), json.get("keys"))
        return error(json.get("message", ""))


class PathSyntaxError(DocumentStoreError, ValueError):
    """A textual path could not be parsed."""


class PathTypeError(DocumentStoreError, TypeError):
    """
    A path step does not match the node kind it is applied to, e.g. a
    field step against a sequence or an index step against a mapping.
    """


class PathIndexError(DocumentStoreError, IndexError):
    """
    A negative index step lies before the start of a sequence in a
    write operation.
    """


class TypeMismatchError(DocumentStoreError, TypeError):
    """
    An operation requires a numeric or sequence node but found another
    kind of node (or got an operand of the wrong kind).
    """


class EmptyContainerError(DocumentStoreError):
    """Pop on an empty sequence."""


class ConflictError(DocumentStoreError):
    """
    A watch-then-commit transaction observed a stale watched key.

    Keyword arguments:
    message -- error message
    keys -- keys whose version changed since they were watched
            (default None)
    """

    def __init__(self, message: str, keys: Optional[list[str]] = None):
        super().__init__(message)
        self.keys = keys or []

    @property
    def json(self):
        return super().json | {"keys": self.keys}


class KeyTypeError(DocumentStoreError, TypeError):
    """
    A container-only update targets a scalar, i.e. an existing scalar
    value sits where a container is required.
    """


ERRORS: dict[str, type[DocumentStoreError]] = {
    e.__name__: e
    for e in (
        DocumentStoreError,
        PathSyntaxError,
        PathTypeError,
        PathIndexError,
        TypeMismatchError,
        EmptyContainerError,
        ConflictError,
        KeyTypeError,
    )
}
