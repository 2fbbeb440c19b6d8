"""
Canonical protocol definitions for spine-sql.

Every module that needs a Connection, Cursor, ConnectionProvider or RowMapper
imports it from here.

Manifesto:
    Protocols define contracts without inheritance:
    - **Decoupling:** The executor depends on shape, not on sqlite3/psycopg2
    - **Testability:** Any object matching the protocol works, including
      recording fakes with injected faults
    - **Portability:** Same repository code on SQLite and PostgreSQL

Architecture:
    ::

        protocols.py
        ├── Cursor              — DB-API 2.0 cursor subset
        ├── Connection          — DB-API 2.0 connection subset
        ├── ConnectionProvider  — acquire/release scoped connections
        └── RowMapper           — (ResultRow) -> T

Guardrails:
    ❌ DON'T: Import sqlite3 or psycopg2 in the executor
    ✅ DO: Program against Connection / Cursor

    ❌ DON'T: Add implementation logic to protocol classes
    ✅ DO: Keep implementations in spine_sql.providers

Tags:
    protocol, connection, cursor, provider, row-mapper, spine-sql
"""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import TYPE_CHECKING, Any, Protocol, TypeVar, runtime_checkable

if TYPE_CHECKING:
    from spine_sql.dialect import Dialect
    from spine_sql.rows import ResultRow

T_co = TypeVar("T_co", covariant=True)


@runtime_checkable
class Cursor(Protocol):
    """Forward-only DB-API cursor as used by the statement executor."""

    @property
    def description(self) -> Any:
        """Column descriptions of the last query, or None."""
        ...

    @property
    def rowcount(self) -> int:
        """Number of rows affected by the last operation."""
        ...

    @property
    def lastrowid(self) -> Any:
        """Row id of the last inserted row (driver specific, may be None)."""
        ...

    def execute(self, sql: str, params: tuple = ()) -> Any:
        """Execute SQL statement with positional parameters."""
        ...

    def fetchone(self) -> Any:
        """Fetch the next row, or None if exhausted."""
        ...

    def fetchall(self) -> list:
        """Fetch all remaining rows."""
        ...

    def close(self) -> None:
        """Close the cursor."""
        ...


@runtime_checkable
class Connection(Protocol):
    """
    Minimal SYNCHRONOUS DB-API connection.

    ``sqlite3.Connection`` and psycopg2 connections satisfy it natively.
    """

    def cursor(self) -> Cursor:
        """Open a new cursor."""
        ...

    def commit(self) -> None:
        """Commit transaction."""
        ...

    def rollback(self) -> None:
        """Rollback transaction."""
        ...

    def close(self) -> None:
        """Close the connection."""
        ...


@runtime_checkable
class ConnectionProvider(Protocol):
    """
    Supplies connections bound to the current unit of work.

    Contract:
        - ``acquire()`` returns a live connection; failures (pool exhausted,
          database unreachable) raise a provider-defined error
        - ``release(conn)`` is called exactly once per ``acquire()`` and does
          not raise for a healthy connection
        - ``driver_errors`` lists the DB-API exception classes the executor
          translates into ``ExecutionError``
        - ``transaction()`` binds one connection to the current context for
          the duration of the block
    """

    @property
    def dialect(self) -> Dialect:
        """Dialect of the backing database."""
        ...

    @property
    def driver_errors(self) -> tuple[type[BaseException], ...]:
        """Driver exception classes raised during statement execution."""
        ...

    def acquire(self) -> Connection:
        """Check out a connection for one statement execution."""
        ...

    def release(self, conn: Connection) -> None:
        """Return a connection obtained from ``acquire()``."""
        ...

    def transaction(self) -> AbstractContextManager[Connection]:
        """Bind a connection to the current context; commit or roll back on exit."""
        ...

    def close(self) -> None:
        """Close every connection owned by the provider."""
        ...


class RowMapper(Protocol[T_co]):
    """Converts the current result row into one value.

    Reads columns by 1-based position.  Called once per row in cursor order;
    must not keep a reference to the row after returning.
    """

    def __call__(self, row: ResultRow) -> T_co: ...


__all__ = [
    "Cursor",
    "Connection",
    "ConnectionProvider",
    "RowMapper",
]
