"""spine-sql -- minimal data access over DB-API connection providers.

Manifesto:
    Repositories should say *what* to run, never *how* to hold a connection.
    ``StatementExecutor`` owns the how: acquire, bind, execute, map rows,
    collect generated keys, translate driver errors, release.  Forgetting
    the release on an error path leaks pool capacity, so it lives in one
    place instead of every repository method.

Architecture::

    Layer 1 -- Types & Errors
        errors.py          ExecutionError, IncorrectResultSizeError, ...
        protocols.py       Connection, Cursor, ConnectionProvider, RowMapper
        params.py          StatementRequest + bind_value dispatch
        rows.py            ResultRow (1-based positional reads)
        keys.py            KeyCollector

    Layer 2 -- Providers
        providers/         SQLite and pooled PostgreSQL providers
        dialect.py         Placeholder style + RETURNING support
        connection.py      create_provider(url)

    Layer 3 -- Execution
        executor.py        StatementExecutor
        repository.py      BaseRepository
        users.py           User / UserRepository

    Ambient
        logging.py         structlog configuration
        settings.py        DatabaseSettings (pydantic-settings)

Tags:
    spine-sql, jdbc-template, data-access, row-mapper, connection-pool
"""

__version__ = "0.1.0"

from spine_sql.connection import create_provider, create_provider_from_settings
from spine_sql.dialect import Dialect, PostgreSQLDialect, SQLiteDialect, get_dialect
from spine_sql.errors import (
    ConfigError,
    DatabaseConnectionError,
    DatabaseError,
    ExecutionError,
    IncorrectResultSizeError,
    IntegrityError,
    SpineSqlError,
)
from spine_sql.executor import StatementExecutor
from spine_sql.keys import KeyCollector
from spine_sql.logging import configure_logging, get_logger
from spine_sql.params import StatementRequest
from spine_sql.protocols import Connection, ConnectionProvider, Cursor, RowMapper
from spine_sql.providers import (
    BaseConnectionProvider,
    PostgreSQLConnectionProvider,
    SQLiteConnectionProvider,
)
from spine_sql.repository import BaseRepository
from spine_sql.rows import ResultRow
from spine_sql.settings import DatabaseSettings
from spine_sql.users import User, UserRepository

__all__ = [
    # Execution
    "StatementExecutor",
    "KeyCollector",
    "ResultRow",
    "RowMapper",
    "StatementRequest",
    # Providers
    "ConnectionProvider",
    "Connection",
    "Cursor",
    "BaseConnectionProvider",
    "SQLiteConnectionProvider",
    "PostgreSQLConnectionProvider",
    "create_provider",
    "create_provider_from_settings",
    # Dialects
    "Dialect",
    "SQLiteDialect",
    "PostgreSQLDialect",
    "get_dialect",
    # Errors
    "SpineSqlError",
    "DatabaseError",
    "ExecutionError",
    "IntegrityError",
    "IncorrectResultSizeError",
    "DatabaseConnectionError",
    "ConfigError",
    # Repositories
    "BaseRepository",
    "User",
    "UserRepository",
    # Ambient
    "DatabaseSettings",
    "configure_logging",
    "get_logger",
]
