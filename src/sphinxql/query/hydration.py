"""Entity hydration.

The search engine returns identifiers in rank order; hydration swaps those
rows for full ORM entities loaded from the relational store and puts them
back in rank order.
"""

from typing import Any, Dict, List, Mapping, Sequence

from sqlalchemy import Select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from sphinxql.common.exceptions import SphinxQLError, hydration_error
from sphinxql.logging import get_logger
from sphinxql.protocols.providers import EntityQueryProtocol

logger = get_logger(__name__)


class SQLAlchemyEntityQuery:
    """Entity query backed by a SQLAlchemy ORM ``Select``.

    Args:
        session: Session used to run the statement
        statement: Base ``select(...)`` statement; extra filters and joins on
            it are kept, its LIMIT/OFFSET and ORDER BY are dropped
        entity: Mapped class (or ``aliased()`` entity) carrying the
            identifier attribute

    Example:
        >>> entity_query = SQLAlchemyEntityQuery(session, select(Article), Article)
        >>> query.use_entity_query(entity_query, column="id")
    """

    def __init__(self, session: Session, statement: Select, entity: Any):
        self.session = session
        self.statement = statement
        self.entity = entity

    def fetch_by_identifiers(self, column: str, identifiers: Sequence[int]) -> Sequence[Any]:
        attribute = getattr(self.entity, column, None)
        if attribute is None:
            raise hydration_error(
                f"Entity {self.entity!r} has no attribute '{column}'",
                column=column,
            )

        statement = (
            self.statement
            .where(attribute.in_(list(identifiers)))
            .limit(None)
            .offset(None)
            .order_by(None)
        )
        try:
            return list(self.session.scalars(statement).unique().all())
        except SQLAlchemyError as exc:
            raise hydration_error(
                f"Loading entities by '{column}' failed: {exc}",
                column=column,
                cause=exc,
            )

    def get_identifier(self, entity: Any, column: str) -> Any:
        return getattr(entity, column)

    def clone(self) -> "SQLAlchemyEntityQuery":
        # Select is generative; sharing it between clones is safe
        return SQLAlchemyEntityQuery(self.session, self.statement, self.entity)


def extract_identifiers(rows: Sequence[Mapping[str, Any]], column: str) -> List[int]:
    """Read ``column`` from every row as an integer, keeping rank order."""
    try:
        return [int(row[column]) for row in rows]
    except KeyError as exc:
        raise hydration_error(
            f"Result rows do not contain the identifier column '{column}'",
            column=column,
            cause=exc,
        )
    except (TypeError, ValueError) as exc:
        raise hydration_error(
            f"Identifier column '{column}' holds a non-integer value",
            column=column,
            cause=exc,
        )


def hydrate(
    rows: Sequence[Mapping[str, Any]],
    entity_query: EntityQueryProtocol,
    column: str,
) -> List[Any]:
    """Replace search rows with entities ordered by search rank.

    Args:
        rows: Rows returned by the search engine, best match first
        entity_query: Collaborator that loads entities by identifier
        column: Identifier column present in both the rows and the entities

    Returns:
        Entities in the order their identifiers appeared in ``rows``;
        identifiers with no entity are skipped
    """
    if not rows:
        return []

    identifiers = extract_identifiers(rows, column)
    positions: Dict[int, int] = {}
    for position, identifier in enumerate(identifiers):
        positions.setdefault(identifier, position)

    try:
        entities = entity_query.fetch_by_identifiers(column, identifiers)
    except SphinxQLError:
        raise
    except Exception as exc:
        raise hydration_error(f"Entity query failed: {exc}", column=column, cause=exc)

    ranked: Dict[int, Any] = {}
    for entity in entities:
        try:
            identifier = int(entity_query.get_identifier(entity, column))
        except (AttributeError, TypeError, ValueError) as exc:
            raise hydration_error(
                f"Entity {entity!r} has no integer '{column}'",
                column=column,
                cause=exc,
            )
        position = positions.get(identifier)
        if position is None:
            logger.warning(
                "Hydrated entity was not part of the search result",
                extra={"column": column, "identifier": identifier},
            )
            continue
        ranked[position] = entity

    return [ranked[position] for position in sorted(ranked)]
