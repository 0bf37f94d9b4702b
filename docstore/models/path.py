"""
Definition of the `Path`-model used to address nodes within a document.
"""

from typing import Optional, TypeAlias
from collections.abc import Sequence
from dataclasses import dataclass
import json
import re

from docstore.errors import PathSyntaxError


Step: TypeAlias = str | int
"""A path step: field name (mapping descent) or index (sequence descent)."""


_RESERVED = ".[]'\""
_INDEX = re.compile(r"-?[0-9]+")


@dataclass(frozen=True)
class Path:
    """
    Immutable structural address of a node within a document.

    A `Path` is an ordered sequence of steps. Every step is either a
    field name (`str`) or an index (`int`; negative indices count from
    the end of a sequence). The empty path addresses the document root.

    The textual form is parsed with `Path.parse`, supported syntax:
    * `$` or the empty string for the root,
    * `.field` or a leading bare `field`,
    * `[3]`, `[-1]` for indices,
    * `["field.with.dots"]` or `['field']` for arbitrary field names.

    Keyword arguments:
    steps -- tuple of steps
             (default ())
    """

    steps: tuple[Step, ...] = ()

    def __post_init__(self):
        for step in self.steps:
            if isinstance(step, bool) or not isinstance(step, (str, int)):
                raise PathSyntaxError(
                    f"Bad path step '{step}' of type "
                    + f"'{step.__class__.__name__}' (expected str or int)."
                )

    @classmethod
    def of(cls, *steps: Step) -> "Path":
        """Returns `Path` made from `steps`."""
        return cls(tuple(steps))

    @property
    def is_root(self) -> bool:
        """Returns `True` if this path addresses the document root."""
        return len(self.steps) == 0

    @property
    def parent(self) -> Optional["Path"]:
        """Returns the parent path or `None` for the root."""
        if self.is_root:
            return None
        return Path(self.steps[:-1])

    @property
    def last(self) -> Optional[Step]:
        """Returns the final step or `None` for the root."""
        if self.is_root:
            return None
        return self.steps[-1]

    def child(self, step: Step) -> "Path":
        """Returns a new path extended by `step`."""
        return Path(self.steps + (step,))

    def __len__(self) -> int:
        return len(self.steps)

    def __iter__(self):
        return iter(self.steps)

    def __str__(self) -> str:
        result = "$"
        for step in self.steps:
            if isinstance(step, int):
                result += f"[{step}]"
            elif step and not any(c in _RESERVED for c in step):
                result += f".{step}"
            else:
                result += f"[{json.dumps(step, ensure_ascii=False)}]"
        return result

    @classmethod
    def parse(cls, text: str) -> "Path":
        """
        Returns `Path` parsed from its textual form.

        Raises `PathSyntaxError` on malformed input.
        """
        if not isinstance(text, str):
            raise PathSyntaxError(
                f"Expected path as string but got '{text.__class__.__name__}'."
            )
        text = text.strip()
        steps: list[Step] = []
        pos = 0
        if text.startswith("$"):
            pos = 1
        elif text and text[0] not in ".[":
            # leading bare field name
            pos, field = _read_field(text, 0)
            steps.append(field)
        while pos < len(text):
            match text[pos]:
                case ".":
                    pos, field = _read_field(text, pos + 1)
                    steps.append(field)
                case "[":
                    pos, step = _read_bracket(text, pos + 1)
                    steps.append(step)
                case _:
                    raise PathSyntaxError(
                        f"Unexpected character '{text[pos]}' at position "
                        + f"{pos} in path '{text}'."
                    )
        return cls(tuple(steps))


def _read_field(text: str, pos: int) -> tuple[int, str]:
    """Reads a dotted field name starting at `pos`."""
    end = pos
    while end < len(text) and text[end] not in ".[]":
        end += 1
    if end == pos:
        raise PathSyntaxError(
            f"Empty field name at position {pos} in path '{text}'."
        )
    return end, text[pos:end]


def _read_bracket(text: str, pos: int) -> tuple[int, Step]:
    """Reads a bracketed step starting after the opening bracket."""
    if pos >= len(text):
        raise PathSyntaxError(f"Unterminated bracket in path '{text}'.")
    if text[pos] in "'\"":
        quote = text[pos]
        end = pos + 1
        while end < len(text) and text[end] != quote:
            if text[end] == "\\":
                end += 1
            end += 1
        if end >= len(text):
            raise PathSyntaxError(
                f"Unterminated string at position {pos} in path '{text}'."
            )
        raw = text[pos:end + 1]
        if quote == '"':
            try:
                field = json.loads(raw)
            except json.JSONDecodeError as exc_info:
                raise PathSyntaxError(
                    f"Bad string at position {pos} in path '{text}': "
                    + f"{exc_info}"
                ) from exc_info
        else:
            field = raw[1:-1].replace("\\'", "'").replace("\\\\", "\\")
        if end + 1 >= len(text) or text[end + 1] != "]":
            raise PathSyntaxError(
                f"Expected ']' at position {end + 1} in path '{text}'."
            )
        return end + 2, field
    end = text.find("]", pos)
    if end == -1:
        raise PathSyntaxError(f"Unterminated bracket in path '{text}'.")
    raw = text[pos:end].strip()
    if not _INDEX.fullmatch(raw):
        raise PathSyntaxError(
            f"Bad index '{raw}' at position {pos} in path '{text}'."
        )
    return end + 1, int(raw)


PathLike: TypeAlias = Path | str | Sequence[Step]


ROOT = Path()
"""The root path."""


def as_path(path: Optional[PathLike]) -> Path:
    """
    Returns `Path` for any of the accepted path-representations: an
    existing `Path`, its textual form, a sequence of steps, or `None`
    (root).
    """
    if path is None:
        return ROOT
    if isinstance(path, Path):
        return path
    if isinstance(path, str):
        return Path.parse(path)
    if isinstance(path, Sequence):
        return Path(tuple(path))
    raise PathSyntaxError(
        f"Unsupported path-type '{path.__class__.__name__}'."
    )
