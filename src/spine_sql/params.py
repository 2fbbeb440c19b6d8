"""Positional parameter binding.

All parameters pass through :func:`bind_value`, the single dispatch point
for coercing Python values before they reach the driver.  Scalars the DB-API
drivers already understand (``str``, ``int``, ``float``, ``bytes``, ``None``,
``bool``, ``Decimal``, ``datetime``) pass through unchanged; the registered
overloads handle the handful of types drivers reject.

Examples:
    >>> from spine_sql.params import StatementRequest
    >>> req = StatementRequest.of("select * from users where id = ?", 1)
    >>> req.bound()
    (1,)
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from functools import singledispatch
from pathlib import PurePath
from typing import Any
from uuid import UUID


@singledispatch
def bind_value(value: Any) -> Any:
    """Coerce one parameter for the driver. Unknown types pass through."""
    return value


@bind_value.register
def _(value: enum.Enum) -> Any:
    return bind_value(value.value)


@bind_value.register
def _(value: PurePath) -> str:
    return str(value)


@bind_value.register
def _(value: UUID) -> str:
    return str(value)


def bind_params(params: tuple[Any, ...] | list[Any]) -> tuple[Any, ...]:
    """Bind parameters positionally; index ``i`` feeds placeholder ``i + 1``."""
    return tuple(bind_value(p) for p in params)


@dataclass(frozen=True)
class StatementRequest:
    """Immutable SQL text plus its ordered parameters."""

    sql: str
    params: tuple[Any, ...] = ()

    @classmethod
    def of(cls, sql: str, *params: Any) -> StatementRequest:
        return cls(sql, tuple(params))

    @property
    def param_count(self) -> int:
        return len(self.params)

    def bound(self) -> tuple[Any, ...]:
        return bind_params(self.params)


__all__ = [
    "StatementRequest",
    "bind_params",
    "bind_value",
]
