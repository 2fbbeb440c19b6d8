"""Statement executor — parameterized SQL over a connection provider.

Every public operation follows the same path:

    ┌──────────────────────────────────────────────────────────────────┐
    │ 1. provider.acquire()            (provider errors pass through)  │
    │ 2. conn.cursor(), bind params    (bind_value per parameter)      │
    │ 3. statement_hook(sql), execute                                  │
    │ 4. walk rows → row_mapper        (query_for_list/_object)        │
    │ 5. walk keys → KeyCollector      (execute_update_returning_keys) │
    │ 6. driver error → ExecutionError (cause kept, logged, re-raised) │
    │ 7. cursor.close(); provider.release(conn)   ← always, once       │
    └──────────────────────────────────────────────────────────────────┘

Examples:
    >>> from spine_sql import StatementExecutor, SQLiteConnectionProvider
    >>> jdbc = StatementExecutor(SQLiteConnectionProvider())
    >>> jdbc.execute_update("create table t (id integer primary key, name text)")
    >>> jdbc.execute_update_returning_keys("insert into t (name) values (?)", "id", "a")
    [1]
    >>> jdbc.query_for_list("select name from t", lambda row: row.get_str(1))
    ['a']

Tags:
    executor, jdbc-template, row-mapper, generated-keys, spine-sql
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import AbstractContextManager, suppress
from typing import Any, TypeVar

from spine_sql.connection import create_provider_from_settings
from spine_sql.errors import ExecutionError, IncorrectResultSizeError
from spine_sql.keys import KeyCollector
from spine_sql.logging import LogContext, configure_logging, get_logger
from spine_sql.params import StatementRequest
from spine_sql.protocols import Connection, ConnectionProvider, Cursor, RowMapper
from spine_sql.rows import ResultRow
from spine_sql.settings import DatabaseSettings

logger = get_logger(__name__)

T = TypeVar("T")
R = TypeVar("R")

StatementHook = Callable[[str], None]

# Raised by drivers while adapting parameters (sqlite3 integer overflow,
# psycopg2 placeholder/argument mismatch) instead of a DB-API Error.
_BINDING_ERRORS = (OverflowError, TypeError, ValueError, IndexError)


def log_statement(sql: str) -> None:
    """Statement hook that logs every statement at INFO."""
    logger.info("statement", sql=sql)


class StatementExecutor:
    """Runs parameterized statements with scoped connection handling.

    Parameters:
        provider: Supplies and reclaims connections; one checkout per call.
        statement_hook: Optional callable invoked with the SQL text right
            before each execution.

    The executor holds no per-call state and can be shared between threads
    when the provider is thread-safe.
    """

    def __init__(
        self,
        provider: ConnectionProvider,
        *,
        statement_hook: StatementHook | None = None,
    ) -> None:
        self._provider = provider
        self._statement_hook = statement_hook

    @classmethod
    def from_settings(cls, settings: DatabaseSettings | None = None) -> StatementExecutor:
        """Build an executor (and its provider) from environment settings.

        Also applies the settings' ``log_level`` and ``log_json`` to the
        process-wide structlog configuration.
        """
        settings = settings or DatabaseSettings()
        configure_logging(level=settings.log_level, json_format=settings.log_json)
        provider = create_provider_from_settings(settings)
        hook = log_statement if settings.log_statements else None
        return cls(provider, statement_hook=hook)

    @property
    def provider(self) -> ConnectionProvider:
        return self._provider

    def transaction(self) -> AbstractContextManager[Connection]:
        """Run the enclosed statements on one connection, committed together."""
        return self._provider.transaction()

    # -- Updates -----------------------------------------------------------

    def execute_update(self, sql: str, *params: Any) -> None:
        """Run a data-modification statement; any result set is discarded."""

        def work(cursor: Cursor, request: StatementRequest) -> None:
            self._execute(cursor, request.sql, request, "execute_update")
            logger.debug("statement_completed", rowcount=cursor.rowcount)

        self._run("execute_update", StatementRequest(sql, params), work)

    def execute_update_returning_keys(
        self, sql: str, key_column: str, *params: Any
    ) -> list[Any]:
        """Run an insert-style statement and return the generated keys of ``key_column``.

        Keys come back in the order the database reported them; an empty list
        means the statement generated none.
        """
        collector: KeyCollector[Any] = KeyCollector(key_column)
        self.execute_update_with_collector(sql, collector, *params)
        return collector.get_keys()

    def execute_update_with_collector(
        self, sql: str, collector: KeyCollector[Any], *params: Any
    ) -> None:
        """Like :meth:`execute_update_returning_keys`, feeding a caller-owned collector."""
        if len(collector):
            raise ValueError(f"{collector!r} was already used; collectors are single-use")
        dialect = self._provider.dialect

        def work(cursor: Cursor, request: StatementRequest) -> None:
            if dialect.supports_returning:
                self._execute(
                    cursor,
                    dialect.with_returning(request.sql, collector.column_name),
                    request,
                    "execute_update_returning_keys",
                )
                for values in _walk(cursor):
                    collector.add_key(values[0])
            else:
                self._execute(cursor, request.sql, request, "execute_update_returning_keys")
                if cursor.rowcount > 0 and cursor.lastrowid is not None:
                    collector.add_key(cursor.lastrowid)
            logger.debug("statement_completed", keys=len(collector))

        self._run("execute_update_returning_keys", StatementRequest(sql, params), work)

    # -- Queries -----------------------------------------------------------

    def query_for_list(self, sql: str, row_mapper: RowMapper[T], *params: Any) -> list[T]:
        """Map every row of the result, in cursor order. Never returns None."""

        def work(cursor: Cursor, request: StatementRequest) -> list[T]:
            self._execute(cursor, request.sql, request, "query_for_list")
            results = [
                _map_row(row_mapper, values, number)
                for number, values in enumerate(_walk(cursor), start=1)
            ]
            logger.debug("statement_completed", rows=len(results))
            return results

        return self._run("query_for_list", StatementRequest(sql, params), work)

    def query_for_object(self, sql: str, row_mapper: RowMapper[T], *params: Any) -> T | None:
        """Map the single row of the result.

        Returns None when no row matches.  Raises
        :class:`IncorrectResultSizeError` when more than one row matches.
        """

        def work(cursor: Cursor, request: StatementRequest) -> T | None:
            self._execute(cursor, request.sql, request, "query_for_object")
            first = cursor.fetchone()
            if first is None:
                logger.debug("statement_completed", rows=0)
                return None
            if cursor.fetchone() is not None:
                logger.warning("incorrect_result_size", sql=request.sql, expected=1)
                raise IncorrectResultSizeError(1, 2, sql=request.sql)
            logger.debug("statement_completed", rows=1)
            return _map_row(row_mapper, first, 1)

        return self._run("query_for_object", StatementRequest(sql, params), work)

    # -- Internals ---------------------------------------------------------

    def _run(
        self,
        operation: str,
        request: StatementRequest,
        work: Callable[[Cursor, StatementRequest], R],
    ) -> R:
        driver_errors = self._provider.driver_errors
        conn = self._provider.acquire()
        try:
            with LogContext(operation=operation, backend=self._provider.dialect.name):
                try:
                    cursor = conn.cursor()
                    try:
                        result = work(cursor, request)
                    except BaseException:
                        # Keep the in-flight error; a failing close must not replace it
                        with suppress(*driver_errors):
                            cursor.close()
                        raise
                    cursor.close()
                    return result
                except driver_errors as e:
                    raise self._translate(e, operation, request) from e
        finally:
            self._provider.release(conn)

    def _execute(
        self, cursor: Cursor, sql: str, request: StatementRequest, operation: str
    ) -> None:
        logger.debug("statement_executing", sql=sql, param_count=request.param_count)
        if self._statement_hook is not None:
            self._statement_hook(sql)
        try:
            cursor.execute(sql, request.bound())
        except _BINDING_ERRORS as e:
            raise self._translate(e, operation, request) from e

    def _translate(
        self, error: BaseException, operation: str, request: StatementRequest
    ) -> ExecutionError:
        translated = ExecutionError(
            f"{operation} failed: {error}",
            sql=request.sql,
            cause=error,
        ).with_context(
            param_count=request.param_count,
            backend=self._provider.dialect.name,
            operation=operation,
        )
        logger.error(
            "statement_failed",
            error=str(error),
            error_type=type(error).__name__,
            sql=request.sql,
            param_count=request.param_count,
            exc_info=error,
        )
        return translated


def _walk(cursor: Cursor) -> Iterator[Any]:
    """Advance the cursor one row at a time until it is exhausted."""
    while (values := cursor.fetchone()) is not None:
        yield values


def _map_row(row_mapper: RowMapper[T], values: Any, row_number: int) -> T:
    row = ResultRow(values, row_number)
    try:
        return row_mapper(row)
    finally:
        row.detach()


__all__ = [
    "StatementExecutor",
    "StatementHook",
    "log_statement",
]
