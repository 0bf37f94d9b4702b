"""
Definition of the JSONable-type, the closed set of node kinds, and
associated utility functions
"""

from typing import Optional, TypeAlias, Any
from collections.abc import MutableMapping
from enum import Enum


JSONable: TypeAlias = Optional[
    str | int | float | bool | list["JSONable"]
    | MutableMapping[str, "JSONable"]
]
JSONObject: TypeAlias = MutableMapping[str, JSONable]


class NodeKind(Enum):
    """Enum-class for the kinds of nodes a document is built from."""

    NULL = "null"
    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"
    SEQUENCE = "array"
    MAPPING = "object"

    @property
    def is_container(self) -> bool:
        """Returns `True` for sequences and mappings."""
        return self in (NodeKind.SEQUENCE, NodeKind.MAPPING)


def kind_of(value: Any) -> NodeKind:
    """
    Returns the `NodeKind` of `value`.

    Raises `TypeError` if `value` is not a document node. Note that
    `bool` is checked before numbers since it is a subclass of `int`.
    """
    if value is None:
        return NodeKind.NULL
    if isinstance(value, bool):
        return NodeKind.BOOLEAN
    if isinstance(value, (int, float)):
        return NodeKind.NUMBER
    if isinstance(value, str):
        return NodeKind.STRING
    if isinstance(value, list):
        return NodeKind.SEQUENCE
    if isinstance(value, MutableMapping):
        return NodeKind.MAPPING
    raise TypeError(
        f"Type '{value.__class__.__name__}' is not a supported document "
        + "node."
    )


def is_number(value: Any) -> bool:
    """Returns `True` if `value` is numeric (booleans excluded)."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_jsonable(value):
    """Returns `True` if `value` conforms to the `JSONable`-spec."""
    if value is None or isinstance(value, (str,  int, float, bool)):
        return True
    if isinstance(value, list):
        return all(is_jsonable(element) for element in value)
    if isinstance(value, MutableMapping):
        return (
            all(isinstance(key, str) for key in value.keys())
            and all(is_jsonable(element) for element in value.values())
        )
    return False


def is_jsonobject(value):
    """Returns `True` if `value` conforms to the `JSONObject`-spec."""
    if not isinstance(value, MutableMapping):
        return False
    return is_jsonable(value)


def clone(value: JSONable) -> JSONable:
    """
    Returns an independent deep copy of the document node `value`.

    Mappings are copied into plain `dict`s. Raises `TypeError` if
    `value` (or any of its children) is not a document node.
    """
    match kind_of(value):
        case NodeKind.SEQUENCE:
            return [clone(element) for element in value]
        case NodeKind.MAPPING:
            result = {}
            for key, element in value.items():
                if not isinstance(key, str):
                    raise TypeError(
                        "Mapping keys in documents need to be strings but "
                        + f"found '{key.__class__.__name__}'."
                    )
                result[key] = clone(element)
            return result
        case _:
            return value
