"""Environment-driven settings for spine-sql.

``DatabaseSettings`` gathers everything needed to build a connection
provider and configure logging: the database URL, pool sizing, timeouts and
statement logging.  Values come from ``SPINE_SQL_*`` environment variables or
a ``.env`` file.

Examples:
    >>> from spine_sql.settings import DatabaseSettings
    >>> s = DatabaseSettings(database_url="sqlite:///users.db")
    >>> s.pool_max_size
    10

Tags:
    settings, configuration, pydantic, environment, spine-sql
"""

from __future__ import annotations

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class DatabaseSettings(BaseSettings):
    """Database and logging settings.

    Fields
    ──────
    database_url     : ``:memory:``, a SQLite path/URL or a PostgreSQL URL
    pool_min_size    : Connections kept open by the PostgreSQL pool
    pool_max_size    : Upper bound on checked-out PostgreSQL connections
    connect_timeout  : Seconds to wait for a PostgreSQL connection
    sqlite_timeout   : Seconds SQLite waits on a locked database
    log_level        : Structlog log level
    log_json         : JSON output (None = auto-detect from tty)
    log_statements   : Log every statement at INFO through the statement hook
    """

    model_config = SettingsConfigDict(
        env_prefix="SPINE_SQL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Connection ───────────────────────────────────────────────
    database_url: str = Field(
        default=":memory:",
        description="Database URL or SQLite path",
    )
    pool_min_size: int = Field(default=1, ge=1)
    pool_max_size: int = Field(default=10, ge=1)
    connect_timeout: int = Field(default=10, ge=1)
    sqlite_timeout: float = Field(default=5.0, gt=0)

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    log_json: bool | None = None
    log_statements: bool = False

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {sorted(_LOG_LEVELS)}")
        return level

    @model_validator(mode="after")
    def _check_pool_bounds(self) -> DatabaseSettings:
        if self.pool_max_size < self.pool_min_size:
            raise ValueError("pool_max_size must be >= pool_min_size")
        return self


__all__ = [
    "DatabaseSettings",
]
