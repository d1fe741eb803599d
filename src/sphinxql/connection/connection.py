"""SphinxQL connection adapter over SQLAlchemy.

The search engine speaks the MySQL wire protocol, so the connection is a
plain SQLAlchemy ``Connection`` on the ``mysql+pymysql`` dialect. Statements
are sent through ``exec_driver_sql`` with ``no_parameters`` set, so the
driver never applies ``%`` parameter formatting: the dialect text produced by
the compiler reaches the engine byte for byte.
"""

import time
from typing import Any, Dict

from pymysql.converters import escape_string
from sqlalchemy.engine import Connection

from sphinxql.common.exceptions import query_execution_error
from sphinxql.connection.result import StatementResult
_RAW_STATEMENT_OPTIONS = {"no_parameters": True}


def quote_literal(value: str) -> str:
    """Quote a string literal with MySQL escaping rules.

    Backslash, both quote characters, NUL, newline, carriage return and
    Ctrl-Z are backslash-escaped, which also protects the MATCH() argument
    delimiter.

    Args:
        value: Raw string value

    Returns:
        Single-quoted, escaped literal
    """
    return f"'{escape_string(value)}'"


class SphinxConnection:
    """Executes SphinxQL statements on a live SQLAlchemy connection.

    Example:
        >>> connection = SphinxConnection(engine.connect())
        >>> result = connection.execute("SHOW META")
        >>> result.key_pairs()["total_found"]
        '42'
    """

    def __init__(self, connection: Connection):
        self._connection = connection

    @property
    def raw_connection(self) -> Connection:
        return self._connection

    @property
    def closed(self) -> bool:
        return self._connection.closed

    def quote(self, value: str) -> str:
        return quote_literal(value)

    def execute(self, statement: str) -> StatementResult:
        """Execute one statement and fetch its rows.

        Args:
            statement: SphinxQL text

        Returns:
            StatementResult with rows and driver row count

        Raises:
            SphinxQLError: With QUERY_EXECUTION_ERROR if the driver fails
        """
        start_time = time.time()

        try:
            result = self._connection.exec_driver_sql(statement, execution_options=_RAW_STATEMENT_OPTIONS)
            returns_rows = bool(result.returns_rows)
            rows = []
            if returns_rows:
                rows = [dict(row) for row in result.mappings().all()]
            row_count = result.rowcount if result.rowcount is not None and result.rowcount >= 0 else len(rows)
            result.close()
        except Exception as exc:
            raise query_execution_error(statement, exc)

        duration = time.time() - start_time
        return StatementResult(
            rows=rows,
            row_count=row_count,
            returns_rows=returns_rows,
            duration_seconds=duration,
        )

    def close(self) -> None:
        self._connection.close()

    def get_connection_info(self) -> Dict[str, Any]:
        """Connection details for debugging/logging."""
        url = self._connection.engine.url
        return {
            "platform": "sphinx",
            "host": url.host,
            "port": url.port,
        }
