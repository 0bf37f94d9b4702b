from .jsonable import (
    JSONable, JSONObject, NodeKind, kind_of, is_number, is_jsonable,
    is_jsonobject, clone,
)
from .path import Step, Path, PathLike, ROOT, as_path
from .result import NOT_FOUND, NO_TTL


__all__ = [
    "JSONable",
    "JSONObject",
    "NodeKind",
    "kind_of",
    "is_number",
    "is_jsonable",
    "is_jsonobject",
    "clone",
    "Step",
    "Path",
    "PathLike",
    "ROOT",
    "as_path",
    "NOT_FOUND",
    "NO_TTL",
]
