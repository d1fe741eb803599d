"""SphinxQL compiler.

Turns the clause state accumulated by a ``Query`` into dialect text. The
compiler performs no I/O: the only thing it needs from the connection is
its string-literal quoting.

Rendering order (each clause is omitted when it has no entries):

    SELECT ... FROM ... WHERE ... [AND|WHERE] MATCH(...) GROUP BY ...
    WITHIN GROUP ORDER BY ... HAVING ... ORDER BY ... LIMIT o, n OPTION ...

``LIMIT`` is always emitted in its two-argument form.
"""

from typing import Any, Callable, Iterable, List, Optional, Sequence

from sphinxql.common.exceptions import invalid_argument_error
from sphinxql.constants.sql import ConditionOperator
from sphinxql.query.clauses import (
    Condition,
    MatchTerm,
    OptionEntry,
    OrderTerm,
    RawCondition,
    RawMatchTerm,
)

# Full-text metacharacters escaped in field names and unsafe match values
MATCH_FIELD_ESCAPE_CHARS = '\\()|-!@~"&/^$=<>'
# Lenient profile for free text where | and - keep their operator meaning
MATCH_TEXT_ESCAPE_CHARS = '\\()!@~&/^$=<>'


def is_sequence(value: Any) -> bool:
    """Whether ``value`` renders as a value list rather than a scalar."""
    return isinstance(value, (list, tuple, set, frozenset))


def escape_chars(value: str, chars: str) -> str:
    """Backslash-escape every occurrence of the characters in ``chars``."""
    return "".join(f"\\{char}" if char in chars else char for char in value)


class SphinxQLCompiler:
    """Renders clause state into SphinxQL text.

    Args:
        quote: Callable quoting a string literal, normally the connection's
            ``quote`` method
        max_matches: Row count rendered in ``LIMIT`` when the query has no
            maximum (``limit=None``)
    """

    def __init__(self, quote: Callable[[str], str], max_matches: int = 1000):
        self._quote = quote
        self.max_matches = max_matches

    def compile(
        self,
        select: Sequence[str],
        from_: Sequence[str],
        where: Sequence[Condition] = (),
        match: Sequence[MatchTerm] = (),
        raw_match: Sequence[RawMatchTerm] = (),
        group_by: Sequence[str] = (),
        within_group_order_by: Sequence[OrderTerm] = (),
        having: Sequence[Condition] = (),
        order_by: Sequence[OrderTerm] = (),
        offset: Optional[int] = 0,
        limit: Optional[int] = 20,
        options: Sequence[OptionEntry] = (),
    ) -> str:
        """Build the statement text.

        Raises:
            SphinxQLError: INVALID_ARGUMENT when no select column or no
                source index is present
        """
        if not select:
            raise invalid_argument_error("You should add at least one SELECT clause", argument="select")

        if not from_:
            raise invalid_argument_error("You should add at least one FROM clause", argument="from")

        clauses: List[str] = []

        clauses.append("SELECT " + ", ".join(select))
        clauses.append("FROM " + ", ".join(from_))

        if where:
            clauses.append("WHERE " + self.build_condition(where))

        if match or raw_match:
            clauses.append(("AND " if where else "WHERE ") + self.build_match(match, raw_match))

        if group_by:
            clauses.append("GROUP BY " + ", ".join(group_by))

        if within_group_order_by:
            clauses.append("WITHIN GROUP ORDER BY " + self.build_order(within_group_order_by))

        if having:
            clauses.append("HAVING " + self.build_condition(having))

        if order_by:
            clauses.append("ORDER BY " + self.build_order(order_by))

        clauses.append(self.build_limit(offset, limit))

        if options:
            clauses.append("OPTION " + self.build_option(options))

        return " ".join(clauses).strip()

    def quote_value(self, value: Any) -> str:
        """Quote a scalar for use in a condition or MATCH().

        Integers and booleans are emitted bare (``True`` → ``1``), ``None`` as
        ``NULL``; every other value goes through the connection's quoting.
        """
        if isinstance(value, bool):
            return str(int(value))
        if isinstance(value, int):
            return str(value)
        if value is None:
            return "NULL"
        return self._quote(str(value))

    def quote_match(self, value: str, is_text: bool = False) -> str:
        """Escape full-text metacharacters.

        Args:
            value: Field name or full-text expression
            is_text: Use the lenient free-text profile, which leaves ``|``,
                ``-`` and ``"`` unescaped
        """
        return escape_chars(value, MATCH_TEXT_ESCAPE_CHARS if is_text else MATCH_FIELD_ESCAPE_CHARS)

    def build_condition(self, conditions: Iterable[Condition]) -> str:
        pieces = []

        for condition in conditions:
            if isinstance(condition, RawCondition):
                pieces.append(condition.expression)
                continue

            value = condition.value
            if condition.operator == ConditionOperator.BETWEEN:
                lower, upper = value
                rendered = f"{self.quote_value(lower)} AND {self.quote_value(upper)}"
            elif is_sequence(value):
                rendered = "(" + ", ".join(self.quote_value(item) for item in value) + ")"
            else:
                rendered = self.quote_value(value)

            pieces.append(f"{condition.column} {condition.operator.value} {rendered}")

        return " AND ".join(pieces)

    def build_match(self, matches: Iterable[MatchTerm], raw_matches: Iterable[RawMatchTerm] = ()) -> str:
        """Assemble the MATCH() clause.

        Field-scoped terms come first as ``@field text``; raw terms follow,
        each prefixed with its combinator except when nothing precedes it.
        The assembled expression is quoted as one string literal.
        """
        pieces: List[str] = []

        for term in matches:
            if isinstance(term.column, str):
                column = self.quote_match(term.column)
            else:
                column = "(" + ",".join(self.quote_match(name) for name in term.column) + ")"

            text = term.text if term.safe else self.quote_match(term.text)
            pieces.append(f"@{column} {text}")

        for raw in raw_matches:
            if pieces:
                pieces.append(f"{raw.combinator.value} {raw.text}")
            else:
                pieces.append(raw.text)

        return f"MATCH({self.quote_value(' '.join(pieces))})"

    def build_order(self, orders: Iterable[OrderTerm]) -> str:
        return ", ".join(f"{order.column} {order.direction.value}" for order in orders)

    def build_limit(self, offset: Optional[int], limit: Optional[int]) -> str:
        offset = 0 if offset is None else int(offset)
        limit = self.max_matches if limit is None else int(limit)
        return f"LIMIT {offset}, {limit}"

    def build_option(self, options: Iterable[OptionEntry]) -> str:
        return ", ".join(f"{option.name} = {option.value}" for option in options)
