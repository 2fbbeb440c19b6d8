"""
Structured logging for spine-sql.

Every statement the executor runs is logged through structlog so the SQL
text, parameter count and outcome land as fields rather than interpolated
strings.

Architecture:
    ::

        configure_logging(level="INFO", json_format=True, service="users-api")
            │
            ▼
        structlog processor chain:
          1. TimeStamper (iso)
          2. merge_contextvars
          3. add_log_level / add_logger_name
          4. service.name + sql truncation
          5. JSONRenderer with ECS names (or ConsoleRenderer for a tty)

        logger = get_logger(__name__)
        logger.debug("statement_executing", sql="select ...", param_count=1)

Examples:
    >>> from spine_sql.logging import configure_logging, get_logger
    >>> configure_logging(level="DEBUG", json_format=False)
    >>> log = get_logger(__name__)
    >>> log.info("provider_opened", backend="sqlite")

Tags:
    logging, structlog, observability, spine-sql
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

DEFAULT_SQL_MAX_LENGTH = 2000


class _ServiceMetadata:
    """Stamp every event with the configured service name."""

    def __init__(self, service: str) -> None:
        self.service = service

    def __call__(self, logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("service.name", self.service)
        return event_dict


class _TruncateSql:
    """Cap the ``sql`` field so bulk statements do not flood the log."""

    def __init__(self, max_length: int) -> None:
        self.max_length = max_length

    def __call__(self, logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        sql = event_dict.get("sql")
        if isinstance(sql, str) and len(sql) > self.max_length:
            event_dict["sql"] = f"{sql[: self.max_length]}... [{len(sql)} chars]"
        return event_dict


def _ecs_field_names(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    for source, target in (("timestamp", "@timestamp"), ("level", "log.level")):
        if source in event_dict:
            event_dict[target] = event_dict.pop(source)
    return event_dict


def configure_logging(
    level: str = "INFO",
    json_format: bool | None = None,
    service: str = "spine-sql",
    add_timestamp: bool = True,
    sql_max_length: int = DEFAULT_SQL_MAX_LENGTH,
) -> None:
    """Configure structlog for statement logging.

    Args:
        level: Minimum level (DEBUG shows every statement the executor runs)
        json_format: True for JSON, False for console, None picks JSON when
            stdout is not a tty
        service: Value of the ``service.name`` field
        add_timestamp: Include an ISO timestamp
        sql_max_length: Longest ``sql`` field value kept verbatim
    """
    numeric_level = getattr(logging, level.upper())
    if json_format is None:
        json_format = not sys.stdout.isatty()

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        _ServiceMetadata(service),
        _TruncateSql(sql_max_length),
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
    ]
    if add_timestamp:
        processors.insert(0, structlog.processors.TimeStamper(fmt="iso"))

    if json_format:
        processors += [
            _ecs_field_names,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=numeric_level)


def get_logger(name: str | None = None) -> Any:
    """Get a structlog logger (usually ``get_logger(__name__)``)."""
    return structlog.get_logger(name)


class LogContext:
    """Bind fields to every log event emitted inside the block.

    The executor wraps each statement in one, so driver failures and row
    counts are logged with ``operation`` and ``backend``.  Values bound by an
    enclosing block are restored on exit rather than dropped.

    Example:
        with LogContext(unit_of_work="signup"):
            repo.insert(user)
    """

    def __init__(self, **fields: Any):
        self._fields = fields
        self._tokens: dict[str, Any] = {}

    def __enter__(self) -> LogContext:
        self._tokens = structlog.contextvars.bind_contextvars(**self._fields)
        return self

    def __exit__(self, *args: Any) -> None:
        structlog.contextvars.reset_contextvars(**self._tokens)


__all__ = [
    "configure_logging",
    "get_logger",
    "LogContext",
]
