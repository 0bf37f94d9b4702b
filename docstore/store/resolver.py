"""
This module contains the path resolver, i.e. the functions that walk a
`Path` through a document for reading and writing.
"""

from typing import Any
from dataclasses import dataclass

from docstore.errors import PathTypeError, PathIndexError, KeyTypeError
from docstore.models import (
    JSONable, NodeKind, kind_of, Path, Step, NOT_FOUND
)


@dataclass
class Slot:
    """
    Location of an existing node: its parent container and the
    (normalized) step within that container.
    """

    container: Any
    step: Step

    @property
    def value(self) -> JSONable:
        """Returns the node in this slot."""
        return self.container[self.step]

    def replace(self, value: JSONable) -> None:
        """Replaces the node in this slot."""
        self.container[self.step] = value


def _step_error(node: JSONable, step: Step, path: Path) -> PathTypeError:
    kind = kind_of(node)
    if kind.is_container:
        expected = "index" if kind is NodeKind.SEQUENCE else "field"
        return PathTypeError(
            f"Cannot apply {'index' if isinstance(step, int) else 'field'} "
            + f"step '{step}' to {kind.value} in path '{path}' (expected "
            + f"{expected} step)."
        )
    return PathTypeError(
        f"Cannot descend with step '{step}' into {kind.value} in path "
        + f"'{path}'."
    )


def normalize_index(sequence: list, index: int) -> int:
    """Returns `index` with negative values counted from the end."""
    if index < 0:
        return len(sequence) + index
    return index


def descend(node: JSONable, step: Step, path: Path) -> Any:
    """
    Returns the child of `node` addressed by `step` or `NOT_FOUND`.

    Raises `PathTypeError` if `step` does not match the kind of `node`.
    """
    match kind_of(node):
        case NodeKind.MAPPING:
            if not isinstance(step, str):
                raise _step_error(node, step, path)
            if step in node:
                return node[step]
            return NOT_FOUND
        case NodeKind.SEQUENCE:
            if not isinstance(step, int):
                raise _step_error(node, step, path)
            index = normalize_index(node, step)
            if 0 <= index < len(node):
                return node[index]
            return NOT_FOUND
        case _:
            raise _step_error(node, step, path)


def resolve(root: JSONable, path: Path) -> Any:
    """
    Returns the node at `path` in `root` or `NOT_FOUND`. Never mutates
    `root`.

    Raises `PathTypeError` if a step does not match the kind of node it
    is applied to.
    """
    node = root
    for step in path:
        node = descend(node, step, path)
        if node is NOT_FOUND:
            return NOT_FOUND
    return node


def locate(root: JSONable, path: Path) -> Any:
    """
    Returns `Slot` of the existing node at non-root `path` or
    `NOT_FOUND`.

    Raises `PathTypeError` like `resolve`.
    """
    if path.is_root:
        raise ValueError("The root path has no slot.")
    parent = resolve(root, path.parent)
    if parent is NOT_FOUND:
        return NOT_FOUND
    step = path.last
    if descend(parent, step, path) is NOT_FOUND:
        return NOT_FOUND
    if isinstance(step, int):
        step = normalize_index(parent, step)
    return Slot(parent, step)


def build_branch(steps: tuple[Step, ...], value: JSONable, path: Path):
    """
    Returns a new branch that places `value` at `steps` relative to the
    branch root, creating mappings for field steps and sequences
    (padded with nulls) for index steps.

    Raises `PathIndexError` for negative index steps since they cannot
    address anything in a new sequence.
    """
    node = value
    for step in reversed(steps):
        if isinstance(step, str):
            node = {step: node}
        else:
            if step < 0:
                raise PathIndexError(
                    f"Negative index '{step}' cannot be auto-created in "
                    + f"path '{path}'."
                )
            node = [None] * step + [node]
    return node


def empty_root_for(path: Path) -> JSONable:
    """
    Returns an empty container suitable as root for the first step of
    the non-root `path`.
    """
    if isinstance(path.steps[0], str):
        return {}
    return []


def assign(root: JSONable, path: Path, value: JSONable) -> JSONable:
    """
    Places `value` at `path` in `root`, auto-creating missing
    intermediate containers. Returns the (possibly new) root.

    Every check that can fail runs before the tree is changed; the
    change itself is a single attachment of either `value` or a fully
    built branch.

    Write semantics for index steps: an index equal to the sequence
    length appends, larger indices pad with nulls, and negative indices
    before the start raise `PathIndexError`.

    Raises
    * `KeyTypeError` if an existing scalar sits where a container is
      required,
    * `PathTypeError` if a step does not match the container kind.
    """
    if path.is_root:
        return value
    container = root
    steps = path.steps
    for position, step in enumerate(steps):
        last = position == len(steps) - 1
        kind = kind_of(container)
        if not kind.is_container:
            raise KeyTypeError(
                f"Cannot write '{path}': existing {kind.value} at "
                + f"'{Path(steps[:position])}' is not a container."
            )
        if kind is NodeKind.MAPPING:
            if not isinstance(step, str):
                raise _step_error(container, step, path)
            if last:
                container[step] = value
                return root
            if step in container:
                container = container[step]
                continue
            container[step] = build_branch(steps[position + 1:], value, path)
            return root
        if not isinstance(step, int):
            raise _step_error(container, step, path)
        index = normalize_index(container, step)
        if index < 0:
            raise PathIndexError(
                f"Index '{step}' out of range for array of length "
                + f"{len(container)} in path '{path}'."
            )
        if index < len(container):
            if last:
                container[index] = value
                return root
            container = container[index]
            continue
        branch = (
            value if last
            else build_branch(steps[position + 1:], value, path)
        )
        container.extend([None] * (index - len(container)) + [branch])
        return root
    return root


def remove(root: JSONable, path: Path) -> int:
    """
    Removes the node at non-root `path` from `root`. Returns the number
    of removed nodes (0 if `path` does not resolve).

    Raises `PathTypeError` like `resolve`.
    """
    slot = locate(root, path)
    if slot is NOT_FOUND:
        return 0
    del slot.container[slot.step]
    return 1
