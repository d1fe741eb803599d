"""Shared fixtures for sphinxql tests."""

from typing import Dict, List, Optional, Union
from unittest.mock import Mock

import pytest

from sphinxql.common.exceptions import query_execution_error
from sphinxql.connection.connection import quote_literal
from sphinxql.connection.result import StatementResult
from sphinxql.query import AliasCounter, Query


class FakeConnection:
    """Connection double that records statements and replays scripted results.

    Results are keyed by exact statement text. An ``Exception`` value makes
    the statement fail the way the real connection does; unscripted
    statements return an empty result set.
    """

    def __init__(self):
        self.statements: List[str] = []
        self.responses: Dict[str, Union[StatementResult, Exception]] = {}
        self.default_meta: Optional[StatementResult] = None

    def script(self, statement: str, rows: Optional[List[dict]] = None, row_count: Optional[int] = None) -> None:
        rows = rows or []
        self.responses[statement] = StatementResult(
            rows=rows,
            row_count=len(rows) if row_count is None else row_count,
            returns_rows=True,
        )

    def fail(self, statement: str, message: str = "syntax error") -> None:
        self.responses[statement] = RuntimeError(message)

    def quote(self, value: str) -> str:
        return quote_literal(value)

    def execute(self, statement: str) -> StatementResult:
        self.statements.append(statement)
        response = self.responses.get(statement)
        if isinstance(response, Exception):
            raise query_execution_error(statement, response)
        if response is None:
            return StatementResult(rows=[], row_count=0, returns_rows=True)
        return response


def meta_rows(**values) -> List[dict]:
    return [{"Variable_name": name, "Value": value} for name, value in values.items()]


@pytest.fixture
def connection() -> FakeConnection:
    return FakeConnection()


@pytest.fixture
def query_logger() -> Mock:
    return Mock(spec=["log_query"])


@pytest.fixture
def alias_counter() -> AliasCounter:
    return AliasCounter()


@pytest.fixture
def query(connection, query_logger, alias_counter) -> Query:
    return Query(connection, query_logger, alias_counter=alias_counter)
