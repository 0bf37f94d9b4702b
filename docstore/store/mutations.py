"""
This module contains the mutation engine: one small transformation per
verb. Every verb validates node and operand before changing anything,
i.e. a failing verb leaves the document exactly as it was.
"""

from typing import Iterable
from math import isfinite

from docstore.errors import TypeMismatchError, EmptyContainerError
from docstore.models import (
    JSONable, NodeKind, kind_of, is_number, clone, Path
)
from .resolver import assign


def _require_sequence(node: JSONable, verb: str) -> list:
    kind = kind_of(node)
    if kind is not NodeKind.SEQUENCE:
        raise TypeMismatchError(
            f"'{verb}' requires an array but found {kind.value}."
        )
    return node


def _require_index(index) -> int:
    if isinstance(index, bool) or not isinstance(index, int):
        raise TypeMismatchError(
            f"Expected integer index but got '{index.__class__.__name__}'."
        )
    return index


def clone_all(values: Iterable[JSONable]) -> list[JSONable]:
    """
    Returns copies of `values`. Raises `TypeMismatchError` if any value
    is not a document node.
    """
    try:
        return [clone(value) for value in values]
    except TypeError as exc_info:
        raise TypeMismatchError(str(exc_info)) from exc_info


def set_node(root: JSONable, path: Path, value: JSONable) -> JSONable:
    """
    Returns the new root after placing a copy of `value` at `path`
    (see `resolver.assign`).

    Raises `TypeMismatchError` if `value` is not a document node.
    """
    return assign(root, path, clone_all([value])[0])


def incr_node(node: JSONable, delta: int | float) -> int | float:
    """
    Returns the result of adding `delta` to the numeric `node`.

    The sum of two integers stays an integer, any float operand yields
    a float.
    """
    if not is_number(delta):
        raise TypeMismatchError(
            "Increment needs to be a number but got "
            + f"'{delta.__class__.__name__}'."
        )
    if not is_number(node):
        raise TypeMismatchError(
            f"Cannot increment {kind_of(node).value} (expected number)."
        )
    result = node + delta
    if isinstance(result, float) and not isfinite(result):
        raise TypeMismatchError(
            f"Increment of {node} by {delta} is not a finite number."
        )
    return result


def normalize_insert_index(length: int, index: int) -> int:
    """
    Returns the insertion position for `index` in a sequence of
    `length`.

    Negative indices count from the end. Positions before the start
    are clamped to the front, positions after the end to the end.
    """
    if index < 0:
        index += length
    return min(max(index, 0), length)


def normalize_pop_index(length: int, index: int) -> int:
    """
    Returns the position to pop for `index` in a non-empty sequence of
    `length`, clamped to the first and last element.
    """
    if index < 0:
        index += length
    return min(max(index, 0), length - 1)


def append_node(node: JSONable, values: Iterable[JSONable]) -> int:
    """
    Appends copies of `values` to the sequence `node`. Returns the new
    length.
    """
    sequence = _require_sequence(node, "arrappend")
    sequence.extend(clone_all(values))
    return len(sequence)


def insert_node(
    node: JSONable, index: int, values: Iterable[JSONable]
) -> int:
    """
    Inserts copies of `values` before `index` into the sequence `node`
    (clamped, see `normalize_insert_index`). Returns the new length.
    """
    sequence = _require_sequence(node, "arrinsert")
    position = normalize_insert_index(len(sequence), _require_index(index))
    sequence[position:position] = clone_all(values)
    return len(sequence)


def pop_node(node: JSONable, index: int = -1) -> JSONable:
    """
    Removes and returns the element at `index` of the sequence `node`
    (clamped, see `normalize_pop_index`).

    Raises `EmptyContainerError` if the sequence is empty.
    """
    sequence = _require_sequence(node, "arrpop")
    index = _require_index(index)
    if not sequence:
        raise EmptyContainerError("Cannot pop from empty array.")
    return sequence.pop(normalize_pop_index(len(sequence), index))
