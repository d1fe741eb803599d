"""Unit tests for SphinxQL compilation."""

import pytest

from sphinxql.common.exceptions import ErrorCode, SphinxQLError
from sphinxql.connection.connection import quote_literal
from sphinxql.constants.sql import ConditionOperator, MatchCombinator, OrderDirection
from sphinxql.query.clauses import (
    MatchTerm,
    OptionEntry,
    OrderTerm,
    RawCondition,
    RawMatchTerm,
    StructuredCondition,
)
from sphinxql.query.compiler import SphinxQLCompiler, escape_chars


class TestSphinxQLCompiler:
    """Test rendering of clause state into dialect text."""

    @pytest.fixture
    def compiler(self):
        return SphinxQLCompiler(quote_literal, max_matches=1000)

    def test_minimal_statement_uses_default_pagination(self, compiler):
        sql = compiler.compile(select=["title"], from_=["articles"])

        assert sql == "SELECT title FROM articles LIMIT 0, 20"

    def test_missing_select_is_rejected(self, compiler):
        with pytest.raises(SphinxQLError, match="SELECT") as exc_info:
            compiler.compile(select=[], from_=["articles"])

        assert exc_info.value.error_code == ErrorCode.INVALID_ARGUMENT

    def test_missing_from_is_rejected(self, compiler):
        with pytest.raises(SphinxQLError, match="FROM") as exc_info:
            compiler.compile(select=["id"], from_=[])

        assert exc_info.value.error_code == ErrorCode.INVALID_ARGUMENT

    def test_clauses_render_in_fixed_order(self, compiler):
        """Every clause present at once renders in dialect order."""
        sql = compiler.compile(
            select=["id", "COUNT(*) AS cnt"],
            from_=["articles", "articles_delta"],
            where=[StructuredCondition(column="author_id", operator=ConditionOperator.EQ, value=3)],
            match=[MatchTerm(column="title", text="python")],
            group_by=["category_id"],
            within_group_order_by=[OrderTerm(column="published_at", direction=OrderDirection.DESC)],
            having=[StructuredCondition(column="cnt", operator=ConditionOperator.GT, value=1)],
            order_by=[OrderTerm(column="cnt", direction=OrderDirection.DESC)],
            offset=10,
            limit=5,
            options=[OptionEntry(name="ranker", value="bm25"), OptionEntry(name="max_matches", value="500")],
        )

        assert sql == (
            "SELECT id, COUNT(*) AS cnt FROM articles, articles_delta "
            "WHERE author_id = 3 AND MATCH('@title python') "
            "GROUP BY category_id "
            "WITHIN GROUP ORDER BY published_at DESC "
            "HAVING cnt > 1 "
            "ORDER BY cnt DESC "
            "LIMIT 10, 5 "
            "OPTION ranker = bm25, max_matches = 500"
        )

    def test_match_without_where_opens_where_clause(self, compiler):
        sql = compiler.compile(
            select=["id"],
            from_=["articles"],
            match=[MatchTerm(column="title", text="python")],
        )

        assert sql == "SELECT id FROM articles WHERE MATCH('@title python') LIMIT 0, 20"

    def test_unlimited_query_renders_max_matches(self, compiler):
        sql = compiler.compile(select=["id"], from_=["articles"], offset=None, limit=None)

        assert sql.endswith("LIMIT 0, 1000")


class TestConditionRendering:
    """Test WHERE/HAVING condition rendering."""

    @pytest.fixture
    def compiler(self):
        return SphinxQLCompiler(quote_literal)

    def test_between_renders_both_bounds(self, compiler):
        condition = StructuredCondition(column="id", operator=ConditionOperator.BETWEEN, value=(1, 5))

        assert compiler.build_condition([condition]) == "id BETWEEN 1 AND 5"

    def test_sequence_renders_parenthesized_list(self, compiler):
        condition = StructuredCondition(column="id", operator=ConditionOperator.IN, value=(1, 2, 3))

        assert compiler.build_condition([condition]) == "id IN (1, 2, 3)"

    def test_not_in_quotes_string_members(self, compiler):
        condition = StructuredCondition(column="tag", operator=ConditionOperator.NOT_IN, value=("a", "b"))

        assert compiler.build_condition([condition]) == "tag NOT IN ('a', 'b')"

    def test_raw_condition_is_verbatim(self, compiler):
        conditions = [
            StructuredCondition(column="id", operator=ConditionOperator.GT, value=10),
            RawCondition(expression="weight() > 5"),
        ]

        assert compiler.build_condition(conditions) == "id > 10 AND weight() > 5"

    def test_string_values_are_escaped(self, compiler):
        condition = StructuredCondition(column="title", operator=ConditionOperator.EQ, value="it's")

        assert compiler.build_condition([condition]) == "title = 'it\\'s'"


class TestValueQuoting:
    """Test scalar and full-text quoting."""

    @pytest.fixture
    def compiler(self):
        return SphinxQLCompiler(quote_literal)

    def test_booleans_and_integers_are_bare(self, compiler):
        assert compiler.quote_value(True) == "1"
        assert compiler.quote_value(False) == "0"
        assert compiler.quote_value(42) == "42"

    def test_floats_are_quoted_as_strings(self, compiler):
        assert compiler.quote_value(1.5) == "'1.5'"

    def test_field_profile_escapes_pipe_and_dash(self, compiler):
        assert compiler.quote_match("a|b-c") == "a\\|b\\-c"

    def test_text_profile_keeps_pipe_and_dash(self, compiler):
        assert compiler.quote_match("a|b-c", is_text=True) == "a|b-c"

    def test_text_profile_still_escapes_operators(self, compiler):
        assert compiler.quote_match("@title (x)", is_text=True) == "\\@title \\(x\\)"

    def test_escape_chars_leaves_plain_text(self):
        assert escape_chars("plain words", "|-") == "plain words"


class TestMatchRendering:
    """Test MATCH() assembly."""

    @pytest.fixture
    def compiler(self):
        return SphinxQLCompiler(quote_literal)

    def test_unsafe_value_is_escaped(self, compiler):
        rendered = compiler.build_match([MatchTerm(column="title", text="a|b")])

        # Escaping backslash is itself escaped by the literal quoting
        assert rendered == "MATCH('@title a\\\\|b')"

    def test_safe_value_is_verbatim(self, compiler):
        rendered = compiler.build_match([MatchTerm(column="title", text="a|b", safe=True)])

        assert rendered == "MATCH('@title a|b')"

    def test_multiple_fields_render_as_list(self, compiler):
        rendered = compiler.build_match([MatchTerm(column=("title", "body"), text="python")])

        assert rendered == "MATCH('@(title,body) python')"

    def test_first_raw_term_has_no_combinator(self, compiler):
        rendered = compiler.build_match(
            [],
            [
                RawMatchTerm(text="@title python"),
                RawMatchTerm(text="@body django", combinator=MatchCombinator.OR),
            ],
        )

        assert rendered == "MATCH('@title python | @body django')"

    def test_raw_terms_follow_processed_terms(self, compiler):
        rendered = compiler.build_match(
            [MatchTerm(column="title", text="python")],
            [RawMatchTerm(text="@body web", combinator=MatchCombinator.AND)],
        )

        assert rendered == "MATCH('@title python & @body web')"
