"""Module providing helper functions for the `docstore`-package."""

from typing import Iterable, Optional


def qjoin(items: Iterable, quote: str = "'", sep: str = ", ") -> str:
    """
    Returns the string-representations of `items` quoted and joined.

    Keyword arguments:
    items -- iterable of objects to be joined
    quote -- quotation character
             (default "'")
    sep -- separator
           (default ", ")
    """
    return sep.join(f"{quote}{item}{quote}" for item in items)


def parse_flag(value: Optional[str], default: bool = False) -> bool:
    """
    Returns boolean interpretation of a query-argument `value`.

    An empty string (flag given without value) counts as `True`, the
    strings "0", "false", and "no" (case-insensitive) as `False`.
    Raises `ValueError` for any other unknown value.

    Keyword arguments:
    value -- raw value or `None` if the argument is missing
    default -- value returned if `value` is `None`
               (default False)
    """
    if value is None:
        return default
    match value.strip().lower():
        case "" | "1" | "true" | "yes":
            return True
        case "0" | "false" | "no":
            return False
        case _:
            raise ValueError(
                f"Unable to interpret '{value}' as boolean flag."
            )
