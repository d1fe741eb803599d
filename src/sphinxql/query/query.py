"""Search query builder and executor.

A ``Query`` accumulates clause state through chainable mutators, compiles
it into SphinxQL, runs it together with a ``SHOW META`` follow-up and
caches the outcome until the next mutation.

State machine:
    Every mutator sets the query DIRTY. Requesting text or results on a
    DIRTY query compiles and executes it; a successful execution sets it
    CLEAN, and a CLEAN query answers from its cache without contacting the
    engine.

Example:
    >>> query = manager.create_query()
    >>> rows = (
    ...     query.select("id", "title")
    ...     .from_("articles")
    ...     .match("title", "full text")
    ...     .where("published", True)
    ...     .order_by("weight()", "desc")
    ...     .set_max_results(10)
    ...     .get_results()
    ... )
    >>> query.get_total_found()
    137
"""

import time
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence, Union

import pandas as pd

from sphinxql.common.exceptions import ErrorCode, SphinxQLError, invalid_argument_error, invalid_state_error
from sphinxql.constants.sql import (
    DEFAULT_LIMIT,
    DEFAULT_OFFSET,
    META_STATEMENT,
    ConditionOperator,
    MatchCombinator,
    OrderDirection,
    QueryState,
)
from sphinxql.logging import get_logger
from sphinxql.protocols.providers import (
    ConnectionProtocol,
    EntityQueryProtocol,
    QueryLoggerProtocol,
    ThrottlerFactory,
)
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
from sphinxql.query.compiler import SphinxQLCompiler, is_sequence
from sphinxql.query.hydration import hydrate
from sphinxql.query.metadata import QueryMetadata
from sphinxql.utils.decorators import traced

if TYPE_CHECKING:
    from sphinxql.connection.result import StatementResult

logger = get_logger(__name__)

_READ_STATEMENTS = ("SELECT", "SHOW", "DESCRIBE", "DESC", "CALL")


class _Unset:
    def __repr__(self) -> str:
        return "UNSET"


UNSET: Any = _Unset()


def _span_attributes(query: "Query") -> Dict[str, Any]:
    attributes: Dict[str, Any] = {
        "db.system": "sphinx",
        "db.operation": "execute",
    }
    if query.indexes:
        attributes["db.sphinx.indexes"] = ",".join(query.indexes)
    return attributes


class Query:
    """Chainable SphinxQL query with cached execution.

    Args:
        connection: Connection used for quoting and execution
        logger: Collaborator receiving every executed statement
        query: Literal statement; when given the builder clauses are
            ignored and the text is executed as is
        throttler_factory: Optional source of a throttler wrapped around the
            main statement
        alias_counter: Source of ``or_where`` aliases, the process-wide
            counter by default
        max_matches: LIMIT row count rendered when ``set_max_results(None)``
    """

    def __init__(
        self,
        connection: ConnectionProtocol,
        logger: QueryLoggerProtocol,
        query: Optional[str] = None,
        throttler_factory: Optional[ThrottlerFactory] = None,
        alias_counter: Optional[AliasCounter] = None,
        max_matches: int = 1000,
    ):
        self.connection = connection
        self.logger = logger
        self.throttler_factory = throttler_factory
        self.alias_counter = alias_counter or get_alias_counter()
        self.compiler = SphinxQLCompiler(connection.quote, max_matches=max_matches)

        self._state = QueryState.DIRTY
        self._raw_query: Optional[str] = query
        self._sql: Optional[str] = None

        self._entity_query: Optional[EntityQueryProtocol] = None
        self._entity_column: Optional[str] = None

        self._select: List[str] = []
        self._from: List[str] = []
        self._where: List[Condition] = []
        self._match: List[MatchTerm] = []
        self._raw_match: List[RawMatchTerm] = []
        self._group_by: List[str] = []
        self._within_group_order_by: List[OrderTerm] = []
        self._having: List[Condition] = []
        self._order_by: List[OrderTerm] = []
        self._offset: Optional[int] = DEFAULT_OFFSET
        self._limit: Optional[int] = DEFAULT_LIMIT
        self._options: List[OptionEntry] = []

        self._results: Optional[List[Any]] = None
        self._num_rows: Optional[int] = None
        self._metadata = QueryMetadata.not_run()
        self._last_error: Optional[SphinxQLError] = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> QueryState:
        return self._state

    @property
    def is_clean(self) -> bool:
        return self._state == QueryState.CLEAN

    @property
    def indexes(self) -> List[str]:
        return list(self._from)

    @property
    def last_error(self) -> Optional[SphinxQLError]:
        """Error absorbed from the most recent execution attempt, if any."""
        return self._last_error

    def _mark_dirty(self) -> None:
        self._state = QueryState.DIRTY
        self._last_error = None

    # ------------------------------------------------------------------
    # Builder
    # ------------------------------------------------------------------

    def set_query(self, query: Optional[str]) -> "Query":
        """Use a literal statement instead of the builder clauses.

        Passing None returns the query to builder mode.
        """
        self._mark_dirty()
        self._raw_query = query
        return self

    def use_entity_query(self, entity_query: EntityQueryProtocol, column: str = "id") -> "Query":
        """Hydrate results into entities loaded by ``entity_query``.

        The identifier column is added to the select list unless it, or
        ``*``, is already selected.
        """
        self._mark_dirty()
        self._entity_query = entity_query.clone()
        self._entity_column = column

        if column not in self._select and "*" not in self._select:
            self.select(column)

        return self

    def select(self, *columns: str) -> "Query":
        """Append columns or expressions to the select list; none means ``*``."""
        self._mark_dirty()
        self._select.extend(columns or ("*",))
        return self

    def add_select_if_not_exists(self, column: str) -> "Query":
        if column not in self._select:
            self._mark_dirty()
            self._select.append(column)
        return self

    def from_(self, *indexes: str) -> "Query":
        """Append source indexes."""
        self._mark_dirty()
        self._from.extend(indexes)
        return self

    def _create_condition(self, column: str, operator: Any, value: Any = UNSET) -> StructuredCondition:
        """Validate and build a WHERE/HAVING condition.

        When ``value`` is omitted, ``operator`` holds the value and the
        operator is inferred: IN for sequences, ``=`` otherwise.

        Raises:
            SphinxQLError: INVALID_ARGUMENT for an unknown operator or a value
                whose shape does not fit the operator
        """
        self._mark_dirty()

        if value is UNSET:
            value = operator
            operator = ConditionOperator.IN if is_sequence(value) else ConditionOperator.EQ

        try:
            operator = ConditionOperator(str(getattr(operator, "value", operator)).upper())
        except ValueError:
            raise invalid_argument_error(f"Invalid operator {operator}", argument="operator", value=operator)

        if operator == ConditionOperator.BETWEEN and (not is_sequence(value) or len(value) != 2):
            raise invalid_argument_error(
                "BETWEEN operator expects a sequence with exactly 2 values",
                argument="value",
                value=value,
            )

        if operator in (ConditionOperator.IN, ConditionOperator.NOT_IN) and not is_sequence(value):
            raise invalid_argument_error(
                f"{operator.value} operator expects a sequence of values",
                argument="value",
                value=value,
            )

        if is_sequence(value):
            value = tuple(value)

        return StructuredCondition(column=column, operator=operator, value=value)

    def where(self, column: str, operator: Any, value: Any = UNSET) -> "Query":
        """Replace all filter conditions with one condition."""
        condition = self._create_condition(column, operator, value)
        self._where = [condition]
        return self

    def and_where(self, column: str, operator: Any, value: Any = UNSET) -> "Query":
        self._where.append(self._create_condition(column, operator, value))
        return self

    def and_raw_where(self, expression: str) -> "Query":
        """Append a filter expression emitted verbatim."""
        self._mark_dirty()
        self._where.append(RawCondition(expression=expression))
        return self

    def or_where(self, components: Sequence[str]) -> "Query":
        """Filter on the OR of already rendered boolean expressions.

        The WHERE clause of the dialect only ANDs predicates, so the OR
        expression is selected under a fresh alias and the filter requires
        that alias to equal 1::

            or_where(["a = 1", "b = 2 AND c = 3"])
            # SELECT ..., ((a = 1) OR (b = 2 AND c = 3)) AS orX0 ... WHERE orX0 = 1
        """
        components = [str(component) for component in components]
        if not components:
            return self

        alias = self.alias_counter.next_alias()

        if len(components) > 1:
            expression = "(" + " OR ".join(f"({component})" for component in components) + ")"
        else:
            expression = components[0]
            if " AND " in expression:
                expression = f"({expression})"

        self.select(f"{expression} AS {alias}")
        self.and_where(alias, ConditionOperator.EQ, 1)
        return self

    def match(self, column: Union[str, Sequence[str]], value: str, safe: bool = False) -> "Query":
        """Replace all full-text terms with one field-scoped term."""
        self._match = []
        return self.and_match(column, value, safe)

    def and_match(self, column: Union[str, Sequence[str]], value: str, safe: bool = False) -> "Query":
        """Append a full-text term for one field or several fields.

        Args:
            column: Field name or sequence of field names
            value: Full-text expression
            safe: Insert ``value`` without escaping full-text operators
        """
        self._mark_dirty()
        columns = column if isinstance(column, str) else tuple(column)
        self._match.append(MatchTerm(column=columns, text=value, safe=safe))
        return self

    def raw_match(self, match: str) -> "Query":
        """Drop the field-scoped terms and add an unescaped expression."""
        self._match = []
        return self.and_raw_match(match)

    def and_raw_match(self, match: str) -> "Query":
        self._mark_dirty()
        self._raw_match.append(RawMatchTerm(text=match, combinator=MatchCombinator.AND))
        return self

    def or_raw_match(self, match: str) -> "Query":
        self._mark_dirty()
        self._raw_match.append(RawMatchTerm(text=match, combinator=MatchCombinator.OR))
        return self

    def group_by(self, column: str) -> "Query":
        self._group_by = []
        return self.and_group_by(column)

    def and_group_by(self, column: str) -> "Query":
        self._mark_dirty()
        self._group_by.append(column)
        return self

    def within_group_order_by(self, column: str, direction: Optional[str] = None) -> "Query":
        self._within_group_order_by = []
        return self.and_within_group_order_by(column, direction)

    def and_within_group_order_by(self, column: str, direction: Optional[str] = None) -> "Query":
        self._mark_dirty()
        self._within_group_order_by.append(
            OrderTerm(column=column, direction=OrderDirection.normalize(direction))
        )
        return self

    def having(self, column: str, operator: Any, value: Any = UNSET) -> "Query":
        condition = self._create_condition(column, operator, value)
        self._having = [condition]
        return self

    def and_having(self, column: str, operator: Any, value: Any = UNSET) -> "Query":
        self._having.append(self._create_condition(column, operator, value))
        return self

    def order_by(self, column: str, direction: Optional[str] = None) -> "Query":
        self._order_by = []
        return self.and_order_by(column, direction)

    def and_order_by(self, column: str, direction: Optional[str] = None) -> "Query":
        """Append a sort term; any direction other than ``desc`` sorts ASC."""
        self._mark_dirty()
        self._order_by.append(OrderTerm(column=column, direction=OrderDirection.normalize(direction)))
        return self

    def set_first_result(self, first_result: Optional[int]) -> "Query":
        """Set the offset of the first row to return."""
        self._mark_dirty()
        self._offset = first_result
        return self

    def set_max_results(self, max_results: Optional[int]) -> "Query":
        """Set the number of rows to return; None means the engine maximum."""
        self._mark_dirty()
        self._limit = max_results
        return self

    def add_option(self, name: str, value: Any) -> "Query":
        self._mark_dirty()
        self._options.append(OptionEntry(name=str(name), value=str(value)))
        return self

    def set_option(self, name: str, value: Any) -> "Query":
        self._options = []
        return self.add_option(name, value)

    # ------------------------------------------------------------------
    # Compilation
    # ------------------------------------------------------------------

    def quote_value(self, value: Any) -> str:
        return self.compiler.quote_value(value)

    def quote_match(self, value: str, is_text: bool = False) -> str:
        return self.compiler.quote_match(value, is_text)

    def get_sql(self) -> str:
        """Return the statement text, compiling it when the query is DIRTY."""
        if self._raw_query is not None:
            return self._raw_query

        if self._state == QueryState.CLEAN and self._sql:
            return self._sql

        self._sql = self.compiler.compile(
            select=self._select,
            from_=self._from,
            where=self._where,
            match=self._match,
            raw_match=self._raw_match,
            group_by=self._group_by,
            within_group_order_by=self._within_group_order_by,
            having=self._having,
            order_by=self._order_by,
            offset=self._offset,
            limit=self._limit,
            options=self._options,
        )
        return self._sql

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def _is_read_query(self, sql: str) -> bool:
        if self._raw_query is None:
            return True
        words = sql.lstrip().split(None, 1)
        return bool(words) and words[0].upper() in _READ_STATEMENTS

    def _run_main_statement(self, sql: str) -> Optional["StatementResult"]:
        throttler = None
        if self.throttler_factory is not None:
            throttler = self.throttler_factory.get_throttler(self.indexes, self._is_read_query(sql))

        try:
            if throttler is not None:
                with throttler.throttle():
                    return self.connection.execute(sql)
            return self.connection.execute(sql)
        except SphinxQLError as exc:
            if exc.error_code != ErrorCode.QUERY_EXECUTION_ERROR:
                raise
            logger.warning(
                "Sphinx query failed, keeping empty result",
                extra={"db.statement": sql, "error_code": exc.error_code.value},
            )
            self._last_error = exc
            return None

    def _populate_metadata(self) -> int:
        """Run ``SHOW META`` and store its key/value output.

        Returns:
            Number of rows the metadata statement returned
        """
        try:
            result = self.connection.execute(META_STATEMENT)
        except SphinxQLError as exc:
            if exc.error_code != ErrorCode.QUERY_EXECUTION_ERROR:
                raise
            self._metadata = QueryMetadata.empty()
            return 0

        self._metadata = QueryMetadata.from_pairs(result.key_pairs())
        return len(result.rows)

    @traced(
        span_name="sphinxql.query.execute",
        attribute_getter=lambda self: _span_attributes(self),
    )
    def execute(self) -> int:
        """Execute the query and return the number of rows.

        A CLEAN query returns its cached row count. Statement failures do
        not raise: the query keeps empty results, a row count of 0, stays
        DIRTY and exposes the error as ``last_error``.

        Raises:
            SphinxQLError: INVALID_ARGUMENT when the clause state cannot be
                compiled
        """
        if self._state == QueryState.CLEAN:
            return self._num_rows or 0

        sql = self.get_sql()

        self._results = []
        self._num_rows = 0
        self._last_error = None

        start_time = time.time()
        result = self._run_main_statement(sql)
        if result is not None:
            if result.returns_rows:
                self._results = list(result.rows)
            self._num_rows = result.row_count
        elapsed = time.time() - start_time

        meta_start = time.time()
        meta_rows = self._populate_metadata()
        meta_elapsed = time.time() - meta_start

        self.logger.log_query(sql, self._num_rows, elapsed)
        self.logger.log_query(META_STATEMENT, meta_rows, meta_elapsed)

        if self._entity_query is not None and self._entity_column is not None:
            self._results = hydrate(self._results, self._entity_query, self._entity_column)

        # CLEAN only once the cached results are final
        if result is not None:
            self._state = QueryState.CLEAN

        return self._num_rows

    def get_results(self) -> List[Any]:
        """Return result rows (or hydrated entities), executing if DIRTY."""
        if self._state != QueryState.CLEAN:
            self.execute()
        return list(self._results or [])

    def get_dataframe(self) -> pd.DataFrame:
        """Return the result rows as a DataFrame, executing if DIRTY.

        Raises:
            SphinxQLError: INVALID_STATE when entity hydration is attached
        """
        if self._entity_query is not None:
            raise invalid_state_error(
                "Hydrated results cannot be converted to a DataFrame",
                state=self._state.value,
            )
        return pd.DataFrame.from_records(self.get_results(), columns=None)

    def get_num_rows(self) -> int:
        """Return the row count of the last execution.

        Raises:
            SphinxQLError: INVALID_STATE when the query is DIRTY, unless the
                last execution attempt failed (the count is then 0)
        """
        if self._state == QueryState.DIRTY and self._last_error is None:
            raise invalid_state_error(
                "You must execute query before getting number of affected rows",
                state=self._state.value,
            )
        return self._num_rows or 0

    def get_metadata(self) -> Dict[str, Any]:
        """Return the ``SHOW META`` mapping, possibly empty.

        Raises:
            SphinxQLError: INVALID_STATE before any execution
        """
        if not self._metadata.has_run:
            raise invalid_state_error("You can get metadata only after executing query")
        return dict(self._metadata.values)

    @property
    def metadata(self) -> QueryMetadata:
        return self._metadata

    def get_metadata_value(self, name: str, default: Any = None) -> Any:
        return self.get_metadata().get(name, default)

    def get_total_found(self) -> int:
        """Total number of matches, independent of LIMIT."""
        return int(self.get_metadata_value("total_found", 0))

    def get_time(self) -> float:
        """Engine-side execution time in seconds."""
        return float(self.get_metadata_value("time", 0))

    def clear_result(self) -> None:
        """Forget compiled text, results and metadata; keep the clauses."""
        self._mark_dirty()
        self._sql = None
        self._results = None
        self._num_rows = None
        self._metadata = QueryMetadata.not_run()

    # ------------------------------------------------------------------
    # Copying
    # ------------------------------------------------------------------

    def clone(self) -> "Query":
        """Return an independent DIRTY copy sharing no clause lists or results."""
        clone = self.__class__.__new__(self.__class__)
        clone.__dict__.update(self.__dict__)

        for name in (
            "_select",
            "_from",
            "_where",
            "_match",
            "_raw_match",
            "_group_by",
            "_within_group_order_by",
            "_having",
            "_order_by",
            "_options",
        ):
            setattr(clone, name, list(getattr(self, name)))

        clone.clear_result()

        if self._entity_query is not None:
            clone._entity_query = self._entity_query.clone()

        return clone

    def __copy__(self) -> "Query":
        return self.clone()

    def __str__(self) -> str:
        return self.get_sql()

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} state={self._state.value} indexes={self._from!r}>"
