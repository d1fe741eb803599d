"""Collaborator protocol definitions.

This module defines the interfaces the query core consumes without owning:
the connection, the query logger, the throttler factory and the entity
query used for hydration. Implementations are matched structurally, so test
doubles need no base class.
"""

from typing import TYPE_CHECKING, Any, ContextManager, List, Optional, Protocol, Sequence, runtime_checkable

if TYPE_CHECKING:
    from sphinxql.connection.result import StatementResult


@runtime_checkable
class ConnectionProtocol(Protocol):
    """Protocol for a live SphinxQL connection handle.

    Implementations quote string literals with the engine's native rules and
    execute one statement at a time.
    """

    def quote(self, value: str) -> str:
        """Return ``value`` as a quoted, escaped string literal."""
        ...

    def execute(self, statement: str) -> "StatementResult":
        """Execute a statement and return its rows and row count.

        Raises:
            SphinxQLError: With QUERY_EXECUTION_ERROR when the engine rejects
                the statement or the transport fails.
        """
        ...


@runtime_checkable
class QueryLoggerProtocol(Protocol):
    """Protocol for the statement logger."""

    def log_query(self, query: str, num_rows: int, elapsed: float) -> None:
        """Record a statement with its row count and elapsed seconds."""
        ...


@runtime_checkable
class Throttler(Protocol):
    """A throttling strategy applied around a single statement."""

    def throttle(self) -> ContextManager[None]:
        """Return a context manager held while the statement runs."""
        ...


@runtime_checkable
class ThrottlerFactory(Protocol):
    """Supplies a throttler for the indexes a statement touches."""

    def get_throttler(self, indexes: List[str], is_read_query: bool) -> Optional[Throttler]:
        """Return a throttler, or None when the statement is not throttled."""
        ...


@runtime_checkable
class EntityQueryProtocol(Protocol):
    """Protocol for the entity hydration collaborator.

    The collaborator re-fetches full domain entities for identifiers matched
    by the search engine. Pagination and ordering of its own are dropped so
    the search rank alone decides the final order.
    """

    def fetch_by_identifiers(self, column: str, identifiers: Sequence[int]) -> Sequence[Any]:
        """Return entities whose ``column`` is one of ``identifiers``."""
        ...

    def get_identifier(self, entity: Any, column: str) -> Any:
        """Read the identifier value back from a fetched entity."""
        ...

    def clone(self) -> "EntityQueryProtocol":
        """Return an independent copy of this collaborator."""
        ...
