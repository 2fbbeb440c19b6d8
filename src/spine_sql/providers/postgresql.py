"""PostgreSQL connection provider backed by a psycopg2 connection pool."""

from __future__ import annotations

from typing import Any

from spine_sql.errors import ConfigError, DatabaseConnectionError
from spine_sql.logging import get_logger
from spine_sql.protocols import Connection

from .base import BaseConnectionProvider
from .types import DatabaseType, ProviderConfig

logger = get_logger(__name__)


def _import_psycopg2() -> Any:
    try:
        import psycopg2
        import psycopg2.pool
    except ImportError:
        raise ConfigError(
            "psycopg2 is required for PostgreSQL. Install with: pip install spine-sql[postgresql]"
        ) from None
    return psycopg2


class PostgreSQLConnectionProvider(BaseConnectionProvider):
    """
    PostgreSQL connection provider.

    Wraps ``psycopg2.pool.ThreadedConnectionPool``: ``acquire()`` is
    ``getconn()`` and ``release()`` is ``putconn()``.  The pool is created
    lazily on first use.
    """

    def __init__(
        self,
        host: str = "localhost",
        port: int = 5432,
        database: str = "",
        username: str | None = None,
        password: str | None = None,
        *,
        dsn: str | None = None,
        pool_min_size: int = 1,
        pool_max_size: int = 10,
        connect_timeout: int = 10,
        **kwargs: Any,
    ):
        config = ProviderConfig(
            db_type=DatabaseType.POSTGRESQL,
            dsn=dsn,
            host=host,
            port=port,
            database=database,
            username=username,
            password=password,
            pool_min_size=pool_min_size,
            pool_max_size=pool_max_size,
            connect_timeout=connect_timeout,
            options=kwargs,
        )
        super().__init__(config)
        self._pool: Any = None

    @classmethod
    def from_url(cls, url: str, **kwargs: Any) -> PostgreSQLConnectionProvider:
        return cls(dsn=url, **kwargs)

    @property
    def driver_errors(self) -> tuple[type[BaseException], ...]:
        return (_import_psycopg2().Error,)

    @property
    def is_connected(self) -> bool:
        return self._pool is not None

    def connect(self) -> None:
        """Create the connection pool."""
        psycopg2 = _import_psycopg2()
        config = self._config

        try:
            if config.dsn:
                self._pool = psycopg2.pool.ThreadedConnectionPool(
                    config.pool_min_size,
                    config.pool_max_size,
                    config.dsn,
                    connect_timeout=config.connect_timeout,
                    **config.options,
                )
            else:
                self._pool = psycopg2.pool.ThreadedConnectionPool(
                    config.pool_min_size,
                    config.pool_max_size,
                    host=config.host,
                    port=config.port,
                    database=config.database,
                    user=config.username,
                    password=config.password,
                    connect_timeout=config.connect_timeout,
                    **config.options,
                )
        except psycopg2.Error as e:
            raise DatabaseConnectionError(
                f"Failed to connect to PostgreSQL: {e}",
                cause=e,
            ).with_context(backend="postgresql") from e

        logger.debug(
            "postgresql_pool_created",
            url=config.redacted(),
            min_size=config.pool_min_size,
            max_size=config.pool_max_size,
        )

    def close(self) -> None:
        """Close every pooled connection."""
        if self._pool is not None:
            self._pool.closeall()
            self._pool = None

    def _checkout(self) -> Connection:
        if self._pool is None:
            self.connect()
        psycopg2 = _import_psycopg2()
        try:
            conn = self._pool.getconn()
        except psycopg2.pool.PoolError as e:
            raise DatabaseConnectionError(
                f"Connection pool exhausted: {e}",
                cause=e,
            ).with_context(backend="postgresql") from e
        except psycopg2.Error as e:
            raise DatabaseConnectionError(
                f"Failed to check out PostgreSQL connection: {e}",
                cause=e,
            ).with_context(backend="postgresql") from e
        try:
            conn.autocommit = True
        except psycopg2.Error as e:
            # Broken connection: discard it so the pool can open a replacement
            self._pool.putconn(conn, close=True)
            raise DatabaseConnectionError(
                f"Checked-out PostgreSQL connection is unusable: {e}",
                cause=e,
            ).with_context(backend="postgresql") from e
        return conn

    def _checkin(self, conn: Connection) -> None:
        if self._pool is not None:
            self._pool.putconn(conn)

    def _begin(self, conn: Connection) -> None:
        conn.autocommit = False

    def _end(self, conn: Connection) -> None:
        conn.autocommit = True


__all__ = [
    "PostgreSQLConnectionProvider",
]
