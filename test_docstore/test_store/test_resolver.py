"""Test module for the path resolver."""

import pytest

from docstore.errors import PathTypeError, PathIndexError, KeyTypeError
from docstore.models import Path, ROOT, NOT_FOUND
from docstore.store.resolver import (
    resolve, locate, assign, remove, build_branch, empty_root_for
)


@pytest.fixture(name="document")
def _document():
    return {"a": {"b": [1, 2, {"c": "d"}]}, "e": None}


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("$", None),
        ("$.a.b[0]", 1),
        ("$.a.b[-1].c", "d"),
        ("$.e", None),
    ],
)
def test_resolve(document, path, expected):
    """Test function `resolve`."""
    if path == "$":
        assert resolve(document, ROOT) is document
    else:
        assert resolve(document, Path.parse(path)) == expected


@pytest.mark.parametrize(
    "path",
    ["$.x", "$.a.x", "$.a.b[3]", "$.a.b[-4]", "$.a.b[2].x"],
)
def test_resolve_not_found(document, path):
    """Test function `resolve` for paths that do not resolve."""
    assert resolve(document, Path.parse(path)) is NOT_FOUND


@pytest.mark.parametrize(
    "path",
    ["$.a[0]", "$.a.b.c", "$.a.b[0].x", "$.e.x", "$.e[0]"],
)
def test_resolve_path_type_error(document, path):
    """Test function `resolve` for step/node-kind mismatches."""
    with pytest.raises(PathTypeError):
        resolve(document, Path.parse(path))


def test_locate(document):
    """Test function `locate`."""
    slot = locate(document, Path.parse("$.a.b[-1]"))
    assert slot.step == 2
    assert slot.value == {"c": "d"}
    slot.replace(3)
    assert document["a"]["b"] == [1, 2, 3]
    assert locate(document, Path.parse("$.a.x")) is NOT_FOUND
    with pytest.raises(ValueError):
        locate(document, ROOT)


def test_build_branch():
    """Test function `build_branch`."""
    path = Path.of("a", 2, "b")
    assert build_branch(path.steps, 1, path) == {"a": [None, None, {"b": 1}]}
    with pytest.raises(PathIndexError):
        build_branch((-1,), 1, Path.of(-1))


def test_empty_root_for():
    """Test function `empty_root_for`."""
    assert empty_root_for(Path.of("a")) == {}
    assert empty_root_for(Path.of(0)) == []


@pytest.mark.parametrize(
    ("root", "path", "value", "expected"),
    [
        ({}, "$", 1, 1),
        ({}, "$.a", 1, {"a": 1}),
        ({"a": 1}, "$.a", 2, {"a": 2}),
        ({}, "$.a.b.c", 1, {"a": {"b": {"c": 1}}}),
        ({"a": {}}, "$.a.b[1]", 1, {"a": {"b": [None, 1]}}),
        ({"a": []}, "$.a[0]", "x", {"a": ["x"]}),
        ({"a": [1]}, "$.a[3]", "x", {"a": [1, None, None, "x"]}),
        ({"a": [1, 2]}, "$.a[-1]", 3, {"a": [1, 3]}),
        ({"a": [{}]}, "$.a[0].b", 1, {"a": [{"b": 1}]}),
        ([], "$[1].a", 1, [None, {"a": 1}]),
    ],
    ids=[
        "root", "new-field", "replace-field", "create-mappings",
        "create-sequence", "append-index", "pad-index", "negative-index",
        "descend-sequence", "sequence-root",
    ],
)
def test_assign(root, path, value, expected):
    """Test function `assign`."""
    assert assign(root, Path.parse(path), value) == expected


@pytest.mark.parametrize(
    ("root", "path", "error"),
    [
        ({"a": 1}, "$.a.b", KeyTypeError),
        ({"a": "s"}, "$.a[0]", KeyTypeError),
        ({"a": None}, "$.a.b.c", KeyTypeError),
        ({"a": []}, "$.a.b", PathTypeError),
        ({"a": {}}, "$.a[0]", PathTypeError),
        ({"a": [1]}, "$.a[-2]", PathIndexError),
        ({"a": {}}, "$.a.b[-1]", PathIndexError),
    ],
)
def test_assign_error(root, path, error):
    """
    Test function `assign` for failing writes, which must leave the
    document unchanged.
    """
    before = repr(root)
    with pytest.raises(error):
        assign(root, Path.parse(path), "value")
    assert repr(root) == before


def test_remove(document):
    """Test function `remove`."""
    assert remove(document, Path.parse("$.a.b[0]")) == 1
    assert document["a"]["b"] == [2, {"c": "d"}]
    assert remove(document, Path.parse("$.a.b[5]")) == 0
    assert remove(document, Path.parse("$.x")) == 0
    assert remove(document, Path.parse("$.e")) == 1
    assert "e" not in document
    with pytest.raises(PathTypeError):
        remove(document, Path.parse("$.a[0]"))
