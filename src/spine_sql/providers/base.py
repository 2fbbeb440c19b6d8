"""Connection provider base class.

Manifesto:
    A provider owns connection lifecycle; the statement executor only asks
    for a connection and hands it back.  The base class implements the part
    every backend shares: binding a connection to the current unit of work
    so that statements issued inside ``transaction()`` reuse it, and
    counting checkouts so leaks are visible.

Features:
    - Abstract ``_checkout()`` / ``_checkin()`` per backend
    - ``acquire()`` returns the context-bound connection when inside
      ``transaction()``, else a fresh checkout
    - ``release()`` is a no-op for the bound connection
    - ``in_use`` counter of connections currently checked out
    - Context-manager protocol for provider lifecycle

Tags:
    spine-sql, database, abstract-base, connection-provider, unit-of-work
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

from spine_sql.dialect import Dialect, get_dialect
from spine_sql.errors import categorize_error, is_retryable
from spine_sql.logging import get_logger
from spine_sql.protocols import Connection

from .types import DatabaseType, ProviderConfig

logger = get_logger(__name__)


class BaseConnectionProvider(ABC):
    """
    Abstract base class for connection providers.

    Outside ``transaction()`` connections run in autocommit mode, so each
    statement is its own unit of work.  Inside, one connection is bound to
    the current context (thread or task) until the block exits.
    """

    def __init__(self, config: ProviderConfig):
        self._config = config
        self._dialect: Dialect = get_dialect(config.db_type.value)
        self._bound: ContextVar[Connection | None] = ContextVar(
            f"spine_sql_bound_{id(self)}", default=None
        )
        self._counter_lock = threading.Lock()
        self._in_use = 0

    @property
    def dialect(self) -> Dialect:
        """SQL dialect for this provider's database type."""
        return self._dialect

    @property
    def db_type(self) -> DatabaseType:
        return self._config.db_type

    @property
    def in_use(self) -> int:
        """Connections currently checked out (transaction-bound ones included)."""
        return self._in_use

    @property
    @abstractmethod
    def driver_errors(self) -> tuple[type[BaseException], ...]:
        """DB-API error classes raised by the driver."""
        ...

    @abstractmethod
    def _checkout(self) -> Connection:
        """Take a connection from the backend in autocommit mode."""
        ...

    @abstractmethod
    def _checkin(self, conn: Connection) -> None:
        """Give a connection back to the backend."""
        ...

    @abstractmethod
    def _begin(self, conn: Connection) -> None:
        """Leave autocommit mode and open a transaction."""
        ...

    def _end(self, conn: Connection) -> None:
        """Restore autocommit mode after a transaction."""
        return None

    @abstractmethod
    def close(self) -> None:
        """Close every connection owned by the provider."""
        ...

    # -- acquire / release -------------------------------------------------

    def acquire(self) -> Connection:
        """Connection for one statement execution."""
        bound = self._bound.get()
        if bound is not None:
            return bound
        conn = self._checkout()
        self._count(+1)
        return conn

    def release(self, conn: Connection) -> None:
        """Return a connection from :meth:`acquire`."""
        if conn is self._bound.get():
            return
        self._count(-1)
        self._checkin(conn)

    @contextmanager
    def transaction(self) -> Iterator[Connection]:
        """Bind one connection to the current context for the block.

        Commits on normal exit and rolls back when the block raises.  A
        nested ``transaction()`` joins the outer one.
        """
        bound = self._bound.get()
        if bound is not None:
            yield bound
            return

        conn = self._checkout()
        self._count(+1)
        token = self._bound.set(conn)
        try:
            self._begin(conn)
            yield conn
            conn.commit()
        except BaseException as e:
            conn.rollback()
            logger.warning(
                "transaction_rolled_back",
                backend=self.db_type.value,
                error_type=type(e).__name__,
                category=categorize_error(e).value,
                retryable=is_retryable(e),
            )
            raise
        finally:
            self._bound.reset(token)
            try:
                self._end(conn)
            finally:
                self._count(-1)
                self._checkin(conn)

    def _count(self, delta: int) -> None:
        with self._counter_lock:
            self._in_use += delta

    def __enter__(self) -> BaseConnectionProvider:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._config.redacted()!r})"


__all__ = [
    "BaseConnectionProvider",
]
