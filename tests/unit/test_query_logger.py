"""Unit tests for the query logger."""

import logging

import pytest
from pydantic import ValidationError

from sphinxql.logging import LoggedQuery, QueryLogger
from sphinxql.protocols import QueryLoggerProtocol


class TestQueryLogger:
    """Test history keeping and log emission."""

    def test_records_history(self):
        query_logger = QueryLogger()

        query_logger.log_query("SELECT id FROM articles LIMIT 0, 20", 20, 0.25)
        query_logger.log_query("SHOW META", 3, 0.5)

        assert query_logger.query_count == 2
        assert query_logger.total_time == pytest.approx(0.75)
        assert query_logger.queries[1] == LoggedQuery(query="SHOW META", num_rows=3, elapsed_seconds=0.5)

    def test_history_can_be_disabled(self):
        query_logger = QueryLogger(keep_history=False)

        query_logger.log_query("SHOW META", 3, 0.1)

        assert query_logger.query_count == 0

    def test_reset(self):
        query_logger = QueryLogger()
        query_logger.log_query("SHOW META", 1, 0.1)

        query_logger.reset()

        assert query_logger.queries == []

    def test_emits_structured_record(self, caplog):
        query_logger = QueryLogger(logger=logging.getLogger("sphinxql.test.queries"))

        with caplog.at_level(logging.INFO, logger="sphinxql.test.queries"):
            query_logger.log_query("SELECT id FROM articles LIMIT 0, 20", 2, 0.0031)

        record = caplog.records[-1]
        assert record.getMessage() == "Sphinx query executed"
        assert getattr(record, "db.statement") == "SELECT id FROM articles LIMIT 0, 20"
        assert getattr(record, "row_count") == "2"
        assert getattr(record, "duration.seconds") == "0.003100"

    def test_satisfies_protocol(self):
        assert isinstance(QueryLogger(), QueryLoggerProtocol)

    def test_logged_query_rejects_negative_rows(self):
        with pytest.raises(ValidationError):
            LoggedQuery(query="SHOW META", num_rows=-1)
