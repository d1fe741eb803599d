"""Query logger collaborator.

Every statement a query sends to the search engine, including the
``SHOW META`` follow-up, is reported here with its row count and elapsed
wall-clock time. The logger keeps the history for profiling and emits one
structured log record per statement.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from pydantic import Field

from sphinxql.logging.logger import QUERY_LOGGER_NAME, get_logger
from sphinxql.types.base import SphinxQLBaseModel


class LoggedQuery(SphinxQLBaseModel):
    """A single statement reported to the query logger."""

    query: str
    num_rows: int = Field(default=0, ge=0)
    elapsed_seconds: float = Field(default=0.0, ge=0.0)


class QueryLogger:
    """Collects executed statements and forwards them to the log stream.

    Example:
        >>> query_logger = QueryLogger()
        >>> query_logger.log_query("SELECT id FROM articles LIMIT 0, 20", 20, 0.004)
        >>> query_logger.query_count
        1
    """

    def __init__(self, logger: Optional[logging.Logger] = None, keep_history: bool = True):
        self._logger = logger or get_logger(QUERY_LOGGER_NAME)
        self._keep_history = keep_history
        self._queries: List[LoggedQuery] = []

    def log_query(self, query: str, num_rows: int, elapsed: float) -> None:
        """Record one statement.

        Args:
            query: Statement text as sent to the engine
            num_rows: Rows returned or affected
            elapsed: Wall-clock duration in seconds
        """
        entry = LoggedQuery(query=query, num_rows=max(num_rows, 0), elapsed_seconds=max(elapsed, 0.0))
        if self._keep_history:
            self._queries.append(entry)

        self._logger.info(
            "Sphinx query executed",
            extra={
                "db.system": "sphinx",
                "db.statement": query,
                "row_count": str(entry.num_rows),
                "duration.seconds": f"{entry.elapsed_seconds:.6f}",
            },
        )

    @property
    def queries(self) -> List[LoggedQuery]:
        return list(self._queries)

    @property
    def query_count(self) -> int:
        return len(self._queries)

    @property
    def total_time(self) -> float:
        """Sum of elapsed seconds over the recorded statements."""
        return sum(entry.elapsed_seconds for entry in self._queries)

    def reset(self) -> None:
        self._queries.clear()
