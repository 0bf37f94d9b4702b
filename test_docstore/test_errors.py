"""Test module for the error taxonomy."""

import pytest

from docstore.errors import (
    ERRORS, DocumentStoreError, PathSyntaxError, PathTypeError,
    PathIndexError, TypeMismatchError, EmptyContainerError, ConflictError,
    KeyTypeError,
)


@pytest.mark.parametrize(
    ("error", "builtin"),
    [
        (PathSyntaxError, ValueError),
        (PathTypeError, TypeError),
        (PathIndexError, IndexError),
        (TypeMismatchError, TypeError),
        (KeyTypeError, TypeError),
    ],
)
def test_hierarchy(error, builtin):
    """Test that errors subclass the matching builtin exceptions."""
    assert issubclass(error, DocumentStoreError)
    assert issubclass(error, builtin)


def test_json():
    """Test property `json`."""
    assert EmptyContainerError("empty").json == {
        "error": "EmptyContainerError", "message": "empty"
    }
    assert ConflictError("conflict", ["a"]).json == {
        "error": "ConflictError", "message": "conflict", "keys": ["a"]
    }


@pytest.mark.parametrize("error", ERRORS.values())
def test_from_json(error):
    """Test method `from_json`."""
    restored = DocumentStoreError.from_json(error("message").json)
    assert type(restored) is error
    assert str(restored) == "message"


def test_from_json_conflict():
    """Test method `from_json` for `ConflictError`."""
    restored = DocumentStoreError.from_json(
        ConflictError("conflict", ["a", "b"]).json
    )
    assert isinstance(restored, ConflictError)
    assert restored.keys == ["a", "b"]


def test_from_json_unknown():
    """Test method `from_json` for unknown error names."""
    restored = DocumentStoreError.from_json(
        {"error": "Unknown", "message": "message"}
    )
    assert type(restored) is DocumentStoreError
