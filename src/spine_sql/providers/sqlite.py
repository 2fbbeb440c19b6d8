"""SQLite connection provider."""

from __future__ import annotations

import sqlite3
import threading
from typing import Any

from spine_sql.errors import DatabaseConnectionError
from spine_sql.logging import get_logger
from spine_sql.protocols import Connection

from .base import BaseConnectionProvider
from .types import DatabaseType, ProviderConfig

logger = get_logger(__name__)


class SQLiteConnectionProvider(BaseConnectionProvider):
    """
    SQLite connection provider.

    Uses the built-in sqlite3 module with a single shared connection, which
    keeps ``:memory:`` databases alive across statements.  Checkouts are
    serialized with a re-entrant lock held from ``acquire()`` to
    ``release()``.  Suitable for:
    - Development and testing
    - Single-process applications
    """

    def __init__(
        self,
        path: str = ":memory:",
        *,
        readonly: bool = False,
        timeout: float = 5.0,
        **kwargs: Any,
    ):
        config = ProviderConfig(
            db_type=DatabaseType.SQLITE,
            path=path,
            readonly=readonly,
            sqlite_timeout=timeout,
            options=kwargs,
        )
        super().__init__(config)
        self._conn: sqlite3.Connection | None = None
        self._lock = threading.RLock()

    @property
    def driver_errors(self) -> tuple[type[BaseException], ...]:
        return (sqlite3.Error,)

    @property
    def is_connected(self) -> bool:
        return self._conn is not None

    def connect(self) -> None:
        """Open the SQLite connection in autocommit mode."""
        path = self._config.path or ":memory:"
        uri = path.startswith("file:")

        try:
            self._conn = sqlite3.connect(
                path,
                timeout=self._config.sqlite_timeout,
                check_same_thread=False,
                isolation_level=None,
                uri=uri,
            )
            self._conn.execute("PRAGMA foreign_keys = ON")

            if self._config.readonly:
                self._conn.execute("PRAGMA query_only = ON")

        except sqlite3.Error as e:
            raise DatabaseConnectionError(
                f"Failed to connect to SQLite: {e}",
                cause=e,
            ).with_context(backend="sqlite") from e

        logger.debug("sqlite_connected", path=path, readonly=self._config.readonly)

    def close(self) -> None:
        """Close the SQLite connection."""
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    def _checkout(self) -> Connection:
        self._lock.acquire()
        try:
            if self._conn is None:
                self.connect()
        except BaseException:
            self._lock.release()
            raise
        return self._conn

    def _checkin(self, conn: Connection) -> None:
        self._lock.release()

    def _begin(self, conn: Connection) -> None:
        conn.execute("BEGIN")


__all__ = [
    "SQLiteConnectionProvider",
]
