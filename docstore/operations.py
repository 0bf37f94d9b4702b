"""
This module contains the JSON-representation of staged store
operations as used for transactions over the adapter-interface.

An operation is a JSON-object with the field "op" (operation name) and
the operation's arguments, e.g.
 >>> {"op": "numincrby", "key": "player:1", "path": "$.score", "delta": 5}
"""

from typing import Any, Mapping

from docstore.models import NOT_FOUND, NO_TTL
from docstore.store import Transaction
from docstore.util import qjoin


# operation name -> (required arguments, optional arguments with default)
OPERATIONS: dict[str, tuple[tuple[str, ...], dict[str, Any]]] = {
    "set": (("key", "path", "value"), {}),
    "delete": (("key",), {"path": None}),
    "numincrby": (("key", "path", "delta"), {}),
    "arrappend": (("key", "path", "values"), {}),
    "arrinsert": (("key", "path", "index", "values"), {}),
    "arrpop": (("key", "path"), {"index": -1}),
    "expire": (("key", "ttl"), {}),
    "persist": (("key",), {}),
}


def operation(op: str, **kwargs) -> dict[str, Any]:
    """
    Returns JSON-representation of an operation. Raises `ValueError`
    for unknown operations or bad arguments.
    """
    _validate({"op": op} | kwargs)
    return {"op": op} | kwargs


def _validate(json: Any) -> tuple[str, list[Any]]:
    """
    Validates the operation `json` and returns its name and positional
    arguments.
    """
    if not isinstance(json, Mapping):
        raise ValueError(
            "Operation needs to be an object but got "
            + f"'{json.__class__.__name__}'."
        )
    name = json.get("op")
    if name not in OPERATIONS:
        raise ValueError(
            f"Unknown operation '{name}' (expected one of "
            + f"{qjoin(OPERATIONS.keys())})."
        )
    required, optional = OPERATIONS[name]
    unknown = set(json.keys()) - {"op", *required, *optional}
    if unknown:
        raise ValueError(
            f"Unknown argument(s) {qjoin(sorted(unknown))} for operation "
            + f"'{name}'."
        )
    missing = [arg for arg in required if arg not in json]
    if missing:
        raise ValueError(
            f"Missing argument(s) {qjoin(missing)} for operation '{name}'."
        )
    if not isinstance(json["key"], str):
        raise ValueError(f"Bad key '{json['key']}' for operation '{name}'.")
    args = [json[arg] for arg in required] + [
        json.get(arg, default) for arg, default in optional.items()
    ]
    if "values" in required:
        values = args.pop()
        if not isinstance(values, list):
            raise ValueError(
                f"Argument 'values' for operation '{name}' needs to be an "
                + f"array but got '{values.__class__.__name__}'."
            )
        args.extend(values)
    return name, args


def stage(transaction: Transaction, json: Any) -> Transaction:
    """
    Stages the operation given as `json` in `transaction`. Raises
    `ValueError` for malformed operations.
    """
    name, args = _validate(json)
    return getattr(transaction, name)(*args)


def encode_result(result: Any) -> dict[str, Any]:
    """Returns JSON-representation of an operation result."""
    if result is NOT_FOUND:
        return {"notFound": True}
    if result is NO_TTL:
        return {"noTtl": True}
    return {"value": result}


def decode_result(json: Mapping[str, Any]) -> Any:
    """Returns operation result from its JSON-representation."""
    if json.get("notFound"):
        return NOT_FOUND
    if json.get("noTtl"):
        return NO_TTL
    return json.get("value")
