"""SphinxQL dialect constants.

This module contains the enumerations and fixed statements shared by the
query builder, the compiler and the executor. It has no dependencies on
other sphinxql modules.
"""

from enum import Enum


META_STATEMENT = "SHOW META"

DEFAULT_OFFSET = 0
DEFAULT_LIMIT = 20


class ConditionOperator(str, Enum):
    """Comparison operators accepted in WHERE and HAVING conditions.

    Operators are matched after upper-casing the caller's input, so
    ``"in"`` and ``"not in"`` are accepted as ``IN`` and ``NOT IN``.
    """

    EQ = "="
    NE = "!="
    LT = "<"
    GT = ">"
    LTE = "<="
    GTE = ">="
    IN = "IN"
    NOT_IN = "NOT IN"
    BETWEEN = "BETWEEN"


class OrderDirection(str, Enum):
    """Sort direction for ORDER BY and WITHIN GROUP ORDER BY terms."""

    ASC = "ASC"
    DESC = "DESC"

    @classmethod
    def normalize(cls, direction) -> "OrderDirection":
        """Return DESC only for a case-insensitive ``desc``, ASC otherwise."""
        if isinstance(direction, str) and direction.upper() == cls.DESC.value:
            return cls.DESC
        return cls.ASC


class MatchCombinator(str, Enum):
    """Boolean join used when splicing a raw full-text expression."""

    AND = "&"
    OR = "|"


class QueryState(str, Enum):
    """Cache-validity state of a query.

    CLEAN means the compiled text and the fetched results reflect the current
    clause state. DIRTY means they must be regenerated before being trusted.
    """

    CLEAN = "CLEAN"
    DIRTY = "DIRTY"


class MetadataState(str, Enum):
    """Lifecycle of the ``SHOW META`` output attached to a query."""

    NOT_RUN = "NOT_RUN"
    EMPTY = "EMPTY"
    POPULATED = "POPULATED"
