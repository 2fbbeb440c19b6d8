"""Provider types and configuration."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from spine_sql.errors import ConfigError

_URL_PASSWORD = re.compile(r"(://[^:/@]*:)[^@]*@")


class DatabaseType(str, Enum):
    """Supported database types."""

    SQLITE = "sqlite"
    POSTGRESQL = "postgresql"


@dataclass
class ProviderConfig:
    """
    Configuration for a connection provider.

    Different fields are used by different database types.
    """

    # Common
    db_type: DatabaseType = DatabaseType.SQLITE

    # SQLite
    path: str | None = None
    sqlite_timeout: float = 5.0
    readonly: bool = False

    # PostgreSQL
    dsn: str | None = None
    host: str = "localhost"
    port: int = 5432
    database: str = ""
    username: str | None = None
    password: str | None = None

    # Connection pool
    pool_min_size: int = 1
    pool_max_size: int = 10
    connect_timeout: int = 10

    # Extra options (driver-specific)
    options: dict[str, Any] = field(default_factory=dict)

    def to_connection_string(self) -> str:
        """Generate connection string for the database type."""
        match self.db_type:
            case DatabaseType.SQLITE:
                return self.path or ":memory:"
            case DatabaseType.POSTGRESQL:
                if self.dsn:
                    return self.dsn
                return f"postgresql://{self.username}:{self.password}@{self.host}:{self.port}/{self.database}"
            case _:
                raise ConfigError(f"Connection string not supported for: {self.db_type}")

    def redacted(self) -> str:
        """Connection string safe to log."""
        return _URL_PASSWORD.sub(r"\1***@", self.to_connection_string())


__all__ = [
    "DatabaseType",
    "ProviderConfig",
]
