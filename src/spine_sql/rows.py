"""Positional view over one fetched result row.

A :class:`ResultRow` is what row mappers receive.  Columns are read by
1-based position, matching the order of the SELECT list.  The row exposes no
cursor navigation, and the executor detaches it once the mapper returns, so a
mapper can neither move the cursor nor keep using the row afterward.

Examples:
    >>> row = ResultRow((1, "alice"), row_number=1)
    >>> row.get_int(1), row.get_str(2)
    (1, 'alice')
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from spine_sql.errors import ExecutionError


class ResultRow:
    """One fetched row, read by 1-based column position."""

    __slots__ = ("_values", "_row_number")

    def __init__(self, values: Sequence[Any], row_number: int) -> None:
        self._values: Sequence[Any] | None = values
        self._row_number = row_number

    @property
    def row_number(self) -> int:
        """1-based position of this row in the result."""
        return self._row_number

    @property
    def column_count(self) -> int:
        return len(self._require())

    def get_object(self, index: int) -> Any:
        values = self._require()
        if not 1 <= index <= len(values):
            raise ExecutionError(
                f"Column index {index} out of range (1..{len(values)})"
            )
        return values[index - 1]

    def get_int(self, index: int) -> int | None:
        value = self.get_object(index)
        return None if value is None else int(value)

    def get_float(self, index: int) -> float | None:
        value = self.get_object(index)
        return None if value is None else float(value)

    def get_str(self, index: int) -> str | None:
        value = self.get_object(index)
        return None if value is None else str(value)

    def get_bool(self, index: int) -> bool | None:
        value = self.get_object(index)
        return None if value is None else bool(value)

    def get_bytes(self, index: int) -> bytes | None:
        value = self.get_object(index)
        return None if value is None else bytes(value)

    def detach(self) -> None:
        """Drop the row values; later reads raise ExecutionError."""
        self._values = None

    def _require(self) -> Sequence[Any]:
        if self._values is None:
            raise ExecutionError(
                f"Row {self._row_number} read after its mapper returned"
            )
        return self._values

    def __repr__(self) -> str:
        state = "detached" if self._values is None else f"{len(self._values)} columns"
        return f"ResultRow(#{self._row_number}, {state})"


__all__ = [
    "ResultRow",
]
