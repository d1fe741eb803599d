"""Constants module for sphinxql.

Enumerations and fixed values used by the query builder, compiler and
executor. As the lowest layer of the package it imports nothing else from
sphinxql.
"""

from sphinxql.constants.sql import (
    DEFAULT_LIMIT,
    DEFAULT_OFFSET,
    META_STATEMENT,
    ConditionOperator,
    MatchCombinator,
    MetadataState,
    OrderDirection,
    QueryState,
)

__all__ = [
    "META_STATEMENT",
    "DEFAULT_OFFSET",
    "DEFAULT_LIMIT",
    "ConditionOperator",
    "OrderDirection",
    "MatchCombinator",
    "QueryState",
    "MetadataState",
]
