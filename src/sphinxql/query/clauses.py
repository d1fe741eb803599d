"""Clause value types.

Each entry the builder accumulates is an immutable model. Conditions are a
tagged variant: a ``StructuredCondition`` is always produced through the
query's validating factory, so its value shape matches its operator, while a
``RawCondition`` carries an expression that is emitted verbatim.
"""

from typing import Any, Tuple, Union

from pydantic import ConfigDict, Field

from sphinxql.constants.sql import ConditionOperator, MatchCombinator, OrderDirection
from sphinxql.types.base import SphinxQLBaseModel


class ClauseModel(SphinxQLBaseModel):
    """Frozen base for clause entries."""
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)


class StructuredCondition(ClauseModel):
    """``<column> <operator> <value>`` condition.

    Attributes:
        column: Attribute or alias the condition applies to
        operator: Comparison operator
        value: Scalar, or a tuple for IN / NOT IN / BETWEEN
    """
    column: str = Field(..., min_length=1)
    operator: ConditionOperator
    value: Any = None


class RawCondition(ClauseModel):
    """Condition emitted exactly as given."""
    expression: str = Field(..., min_length=1)


Condition = Union[StructuredCondition, RawCondition]


class MatchTerm(ClauseModel):
    """A field-scoped full-text term.

    Attributes:
        column: A field name or several field names
        text: Full-text expression for the field(s)
        safe: When True the text is already valid full-text syntax and is
            inserted without escaping
    """
    column: Union[str, Tuple[str, ...]]
    text: str
    safe: bool = False


class RawMatchTerm(ClauseModel):
    """An unescaped full-text expression joined to the preceding terms."""
    text: str
    combinator: MatchCombinator = MatchCombinator.AND


class OrderTerm(ClauseModel):
    column: str = Field(..., min_length=1)
    direction: OrderDirection = OrderDirection.ASC


class OptionEntry(ClauseModel):
    """``OPTION name = value`` entry, both sides rendered verbatim."""
    name: str = Field(..., min_length=1)
    value: str
