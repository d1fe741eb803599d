"""Query builder, compiler and executor.

Example:
    >>> from sphinxql.query import Query
    >>> query = Query(connection, query_logger)
    >>> query.select("id").from_("articles").match("title", "python").get_sql()
    "SELECT id FROM articles WHERE MATCH('@title python') LIMIT 0, 20"
"""

from sphinxql.query.aliases import AliasCounter, get_alias_counter
from sphinxql.query.clauses import (
    Condition,
    MatchTerm,
    OptionEntry,
    OrderTerm,
    RawCondition,
    RawMatchTerm,
    StructuredCondition,
)
from sphinxql.query.compiler import SphinxQLCompiler
from sphinxql.query.hydration import SQLAlchemyEntityQuery, hydrate
from sphinxql.query.metadata import QueryMetadata
from sphinxql.query.query import UNSET, Query

__all__ = [
    "Query",
    "UNSET",
    "SphinxQLCompiler",
    "QueryMetadata",
    "AliasCounter",
    "get_alias_counter",
    "Condition",
    "StructuredCondition",
    "RawCondition",
    "MatchTerm",
    "RawMatchTerm",
    "OrderTerm",
    "OptionEntry",
    "SQLAlchemyEntityQuery",
    "hydrate",
]
