"""
Structured error types for spine-sql.

Every failure that leaves the statement executor is a typed
:class:`SpineSqlError` carrying a category, a retry flag, structured context
and the original driver exception as ``cause``.  Callers catch one error kind
(:class:`ExecutionError`) no matter which DB-API driver sits underneath.

Manifesto:
    - **Uniform translation:** sqlite3.Error, psycopg2.Error, ... all surface
      as ExecutionError
    - **Error chaining:** The driver exception is kept as ``cause`` and
      ``__cause__``
    - **Explicit retry semantics:** Each error knows if it's retryable
    - **Not-found is not an error:** Single-row queries return ``None``

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                      SpineSqlError                           │
        │  (category, retryable, context, cause)                      │
        ├─────────────────────────────────────────────────────────────┤
        │                                                              │
        │  DatabaseError          TransientError       ConfigError     │
        │  (DATABASE)             (retryable=True)     (CONFIG)        │
        │     │                       │                    │           │
        │  ExecutionError         DatabaseConnectionError  InvalidConfig│
        │  IntegrityError                                              │
        │     │                                                        │
        │  IncorrectResultSizeError                                    │
        └─────────────────────────────────────────────────────────────┘

Guardrails:
    ❌ DON'T: Let raw driver exceptions escape the executor
    ✅ DO: Wrap them in ExecutionError with cause=

    ❌ DON'T: Raise for zero rows from query_for_object
    ✅ DO: Return None and let the caller decide

Tags:
    error-handling, exception-hierarchy, database, spine-sql
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and routing."""

    DATABASE = "DATABASE"  # Statement execution, constraint violations
    NETWORK = "NETWORK"  # Connection refused, pool exhausted
    CONFIG = "CONFIG"  # Bad URL, invalid settings
    INTERNAL = "INTERNAL"  # Bugs, unexpected state
    UNKNOWN = "UNKNOWN"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Only fields that are set end up in :meth:`to_dict`, so the result can be
    splatted straight into a structlog call.

    Attributes:
        sql: Statement text that was executing
        param_count: Number of bound parameters (values are never recorded)
        backend: Provider backend name (``"sqlite"``, ``"postgresql"``)
        operation: Executor operation (``"query_for_list"``, ...)
        metadata: Additional key-value pairs
    """

    sql: str | None = None
    param_count: int | None = None
    backend: str | None = None
    operation: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["sql", "param_count", "backend", "operation"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class SpineSqlError(Exception):
    """
    Base exception for all spine-sql errors.

    Subclasses set ``default_category`` and ``default_retryable`` so that
    call sites only pass what differs from the defaults.

    Examples:
        >>> error = SpineSqlError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> error.retryable
        False

        >>> try:
        ...     raise OSError("disk full")
        ... except OSError as e:
        ...     error = SpineSqlError("write failed", cause=e)
        >>> error.cause
        OSError('disk full')
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = self.default_retryable if retryable is None else retryable
        self.context = context or ErrorContext()
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> SpineSqlError:
        """Add context fields, returning ``self`` for chaining.

        Unknown keys go to ``context.metadata``.
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Serialize for structured logging."""
        result: dict[str, Any] = {
            "error_type": type(self).__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context = self.context.to_dict()
        if context:
            result["context"] = context
        if self.cause is not None:
            result["cause"] = f"{type(self.cause).__name__}: {self.cause}"
        return result

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# TRANSIENT ERRORS
# =============================================================================


class TransientError(SpineSqlError):
    """Temporary failure; the operation may succeed if retried by the caller."""

    default_category = ErrorCategory.NETWORK
    default_retryable = True


class DatabaseConnectionError(TransientError):
    """A connection could not be opened or checked out of the pool."""

    default_category = ErrorCategory.DATABASE


# =============================================================================
# DATABASE ERRORS
# =============================================================================


class DatabaseError(SpineSqlError):
    """Database query or transaction error."""

    default_category = ErrorCategory.DATABASE
    default_retryable = False


class ExecutionError(DatabaseError):
    """
    Statement preparation, binding, execution or cursor traversal failed.

    The driver-level exception is available as ``cause``.  Raised with
    ``raise ... from cause`` so tracebacks show both.
    """

    def __init__(self, message: str, *, sql: str | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.sql = sql
        if sql is not None and self.context.sql is None:
            self.context.sql = sql


class IntegrityError(DatabaseError):
    """Result violated an integrity expectation of the caller."""

    pass


class IncorrectResultSizeError(IntegrityError):
    """A single-row query matched more rows than expected."""

    def __init__(self, expected: int, actual: int, *, sql: str | None = None):
        self.expected = expected
        self.actual = actual
        self.sql = sql
        qualifier = "at least " if actual > expected else ""
        super().__init__(
            f"Incorrect result size: expected {expected}, got {qualifier}{actual}",
            context=ErrorContext(sql=sql),
        )


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(SpineSqlError):
    """
    Configuration error.

    Never retryable - configuration must be fixed.
    """

    default_category = ErrorCategory.CONFIG
    default_retryable = False


class InvalidConfigError(ConfigError):
    """Configuration value is invalid."""

    def __init__(self, key: str, value: Any, message: str | None = None):
        self.key = key
        self.value = value
        super().__init__(message or f"Invalid configuration for {key}: {value!r}")


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def is_retryable(error: BaseException) -> bool:
    """Check if an error is retryable."""
    if isinstance(error, SpineSqlError):
        return error.retryable
    return isinstance(error, (ConnectionError, TimeoutError))


def categorize_error(error: BaseException) -> ErrorCategory:
    """Get the category of an error."""
    if isinstance(error, SpineSqlError):
        return error.category
    if isinstance(error, (ConnectionError, TimeoutError)):
        return ErrorCategory.NETWORK
    return ErrorCategory.UNKNOWN


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "SpineSqlError",
    "TransientError",
    "DatabaseConnectionError",
    "DatabaseError",
    "ExecutionError",
    "IntegrityError",
    "IncorrectResultSizeError",
    "ConfigError",
    "InvalidConfigError",
    "is_retryable",
    "categorize_error",
]
