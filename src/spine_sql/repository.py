"""Base repository over the statement executor.

Provides :class:`BaseRepository` — pairs a :class:`StatementExecutor` with
the provider's :class:`~spine_sql.dialect.Dialect` so that domain
repositories write placeholder-portable SQL and never touch connections.

Usage:
    >>> class ItemRepository(BaseRepository):
    ...     def find_name(self, item_id: int) -> str | None:
    ...         return self.jdbc.query_for_object(
    ...             f"select name from items where id = {self.ph(1)}",
    ...             lambda row: row.get_str(1),
    ...             item_id,
    ...         )

Tags:
    repository, database, abstraction, portability
"""

from __future__ import annotations

from spine_sql.dialect import Dialect
from spine_sql.executor import StatementExecutor
from spine_sql.protocols import ConnectionProvider


class BaseRepository:
    """Dialect-aware base class for data-access repositories.

    Parameters:
        jdbc: Statement executor shared by the repository's queries.
    """

    def __init__(self, jdbc: StatementExecutor) -> None:
        self.jdbc = jdbc

    @classmethod
    def from_provider(cls, provider: ConnectionProvider, **kwargs):
        """Create a repository with its own executor over ``provider``."""
        return cls(StatementExecutor(provider), **kwargs)

    @property
    def dialect(self) -> Dialect:
        return self.jdbc.provider.dialect

    def ph(self, count: int) -> str:
        """Shortcut for ``self.dialect.placeholders(count)``.

        Embed directly in f-strings:

            f"select * from t where id = {self.ph(1)}"
        """
        return self.dialect.placeholders(count)


__all__ = [
    "BaseRepository",
]
