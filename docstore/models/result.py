"""
Definition of the sentinel results returned by `docstore`-operations.
"""


class _Sentinel:
    """
    Named singleton result-variant.

    Keyword arguments:
    name -- sentinel name
    truthy -- boolean value of the sentinel
    """

    _instances: dict[str, "_Sentinel"] = {}

    def __new__(cls, name: str, truthy: bool):
        if name not in cls._instances:
            instance = super().__new__(cls)
            instance._name = name
            instance._truthy = truthy
            cls._instances[name] = instance
        return cls._instances[name]

    def __repr__(self) -> str:
        return self._name

    def __bool__(self) -> bool:
        return self._truthy

    def __reduce__(self):
        return (_Sentinel, (self._name, self._truthy))


NOT_FOUND = _Sentinel("NOT_FOUND", False)
"""Result for an absent (or expired) key, or a path that does not resolve."""

NO_TTL = _Sentinel("NO_TTL", True)
"""Result of a TTL-query for an existing key without expiration."""
