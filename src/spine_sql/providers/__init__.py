"""Connection providers -- acquire/release adapters over real drivers.

Architecture::

    BaseConnectionProvider (base.py)      acquire/release + unit-of-work binding
        |-- SQLiteConnectionProvider      stdlib sqlite3 (always available)
        |-- PostgreSQLConnectionProvider  psycopg2 ThreadedConnectionPool (optional)

    ProviderConfig (types.py)             connection parameters
    DatabaseType (types.py)               enum of supported backends

The PostgreSQL driver is import-guarded: it is only required when the pool
is first created.  Install the extra::

    pip install spine-sql[postgresql]

Tags:
    spine-sql, database, providers, connection-pool, sqlite, postgresql
"""

from .base import BaseConnectionProvider
from .postgresql import PostgreSQLConnectionProvider
from .sqlite import SQLiteConnectionProvider
from .types import DatabaseType, ProviderConfig

__all__ = [
    "DatabaseType",
    "ProviderConfig",
    "BaseConnectionProvider",
    "SQLiteConnectionProvider",
    "PostgreSQLConnectionProvider",
]
