"""Generated-key accumulator."""

from __future__ import annotations

from typing import Any, Generic, TypeVar

K = TypeVar("K")


class KeyCollector(Generic[K]):
    """Collects the keys a database generated for ``column_name``.

    Keys are kept in the order the database reported them.  A collector is
    used for exactly one statement and then read by the caller; it never
    checks whether any key arrived, that is the caller's call.

    Example:
        >>> keys = KeyCollector("id")
        >>> keys.add_key(1)
        >>> keys.get_keys()
        [1]
    """

    def __init__(self, column_name: str) -> None:
        if not column_name:
            raise ValueError("column_name must be a non-empty column name")
        self.column_name = column_name
        self._keys: list[K] = []

    def add_key(self, value: K) -> None:
        self._keys.append(value)

    def get_keys(self) -> list[K]:
        return list(self._keys)

    @property
    def keys(self) -> list[K]:
        return self.get_keys()

    def __len__(self) -> int:
        return len(self._keys)

    def __repr__(self) -> str:
        return f"KeyCollector(column_name={self.column_name!r}, keys={self._keys!r})"


def first_key(collector: KeyCollector[Any]) -> Any:
    """First collected key, or None when the statement generated none."""
    keys = collector.get_keys()
    return keys[0] if keys else None


__all__ = [
    "KeyCollector",
    "first_key",
]
