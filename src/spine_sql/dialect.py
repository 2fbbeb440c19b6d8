"""SQL dialect abstraction.

A ``Dialect`` knows the two things about a backend that the statement
executor and repositories cannot avoid: its positional placeholder style and
how to ask it for generated keys after an insert.  Everything else in the SQL
text is passed through untouched.

Architecture::

    ┌──────────────────────────────┐  ┌──────────────────────────────┐
    │ SQLiteDialect                │  │ PostgreSQLDialect            │
    │ ?, ?, ?                      │  │ %s, %s, %s                   │
    │ RETURNING id  (>= 3.35)      │  │ RETURNING id                 │
    │ cursor.lastrowid (fallback)  │  │                              │
    └──────────────────────────────┘  └──────────────────────────────┘

Examples:
    >>> from spine_sql.dialect import get_dialect
    >>> d = get_dialect("sqlite")
    >>> d.placeholders(3)
    '?, ?, ?'
    >>> get_dialect("postgresql").with_returning("insert into users (a) values (%s)", "id")
    'insert into users (a) values (%s)\\nRETURNING id'

Tags:
    dialect, sql, placeholders, generated-keys, spine-sql
"""

from __future__ import annotations

import sqlite3
from typing import Protocol, runtime_checkable


@runtime_checkable
class Dialect(Protocol):
    """SQL dialect contract."""

    @property
    def name(self) -> str:
        """Human-readable dialect name (e.g. ``'sqlite'``)."""
        ...

    @property
    def supports_returning(self) -> bool:
        """Whether generated keys can be read back with a RETURNING clause."""
        ...

    def placeholder(self, index: int) -> str:
        """Single positional placeholder (1-based index).

        ``index`` is ignored by dialects that use anonymous placeholders
        (SQLite ``?``, psycopg2 ``%s``).
        """
        ...

    def placeholders(self, count: int) -> str:
        """Comma-separated placeholder list."""
        ...

    def with_returning(self, sql: str, column: str) -> str:
        """Append a clause that reports ``column`` for every affected row."""
        ...


def _append_returning(sql: str, column: str) -> str:
    stripped = sql.rstrip().rstrip(";").rstrip()
    # Own line: a trailing "--" comment must not swallow the clause
    return f"{stripped}\nRETURNING {column}"


class SQLiteDialect:
    """SQLite dialect — ``?`` placeholders.

    RETURNING is available from SQLite 3.35; older libraries fall back to
    ``cursor.lastrowid`` which reports one key per statement.
    """

    def __init__(self, version_info: tuple[int, ...] | None = None) -> None:
        self._version_info = version_info or sqlite3.sqlite_version_info

    @property
    def name(self) -> str:
        return "sqlite"

    @property
    def supports_returning(self) -> bool:
        return self._version_info >= (3, 35, 0)

    def placeholder(self, index: int) -> str:  # noqa: ARG002
        return "?"

    def placeholders(self, count: int) -> str:
        return ", ".join("?" for _ in range(count))

    def with_returning(self, sql: str, column: str) -> str:
        return _append_returning(sql, column)


class PostgreSQLDialect:
    """PostgreSQL dialect — ``%s`` placeholders (psycopg2)."""

    @property
    def name(self) -> str:
        return "postgresql"

    @property
    def supports_returning(self) -> bool:
        return True

    def placeholder(self, index: int) -> str:  # noqa: ARG002
        return "%s"

    def placeholders(self, count: int) -> str:
        return ", ".join("%s" for _ in range(count))

    def with_returning(self, sql: str, column: str) -> str:
        return _append_returning(sql, column)


# Dialects are stateless
_DIALECTS: dict[str, Dialect] = {
    "sqlite": SQLiteDialect(),
    "postgresql": PostgreSQLDialect(),
    "postgres": PostgreSQLDialect(),  # alias
}


def get_dialect(db_type: str) -> Dialect:
    """Get a dialect by database type name.

    Raises:
        ValueError: If ``db_type`` is not recognised.
    """
    key = db_type.lower()
    if key not in _DIALECTS:
        raise ValueError(
            f"Unknown dialect '{db_type}'. "
            f"Supported: {sorted(set(_DIALECTS) - {'postgres'})}"
        )
    return _DIALECTS[key]


def register_dialect(name: str, dialect: Dialect) -> None:
    """Register a custom dialect implementation (third-party drivers, test doubles)."""
    _DIALECTS[name.lower()] = dialect


__all__ = [
    "Dialect",
    "SQLiteDialect",
    "PostgreSQLDialect",
    "get_dialect",
    "register_dialect",
]
