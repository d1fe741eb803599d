import json
import logging

from sphinxql.logging.logger import MAX_STATEMENT_LENGTH, QUERY_LOGGER_NAME, CustomJsonFormatter, setup_logging


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="sphinxql.queries",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg="Sphinx query executed",
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formatter_emits_json_with_extra_fields():
    record = _record(**{"db.statement": "SHOW META", "row_count": "3"})

    payload = json.loads(CustomJsonFormatter().format(record))

    assert payload["message"] == "Sphinx query executed"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "sphinxql.queries"
    assert payload["db.statement"] == "SHOW META"
    assert payload["row_count"] == "3"
    assert "timestamp" in payload
    assert "lineno" not in payload


def test_formatter_includes_trace_ids():
    record = _record(otelTraceID="abc", otelSpanID="def")

    payload = json.loads(CustomJsonFormatter().format(record))

    assert payload["trace_id"] == "abc"
    assert payload["span_id"] == "def"


def test_formatter_serializes_unknown_types():
    record = _record(details={"state": object()})

    payload = json.loads(CustomJsonFormatter().format(record))

    assert payload["details"]["state"].startswith("<object object")


def test_formatter_truncates_long_statements():
    record = _record(**{"db.statement": "SELECT " + "x" * (MAX_STATEMENT_LENGTH * 2)})

    payload = json.loads(CustomJsonFormatter().format(record))

    assert len(payload["db.statement"]) == MAX_STATEMENT_LENGTH
    assert payload["db.statement"].endswith("...")


def test_setup_logging_sets_query_logger_level():
    root = logging.getLogger()
    previous_handlers, previous_level = list(root.handlers), root.level
    try:
        setup_logging("INFO", query_level="warning")

        assert logging.getLogger(QUERY_LOGGER_NAME).level == logging.WARNING
        assert root.level == logging.INFO
        assert isinstance(root.handlers[-1].formatter, CustomJsonFormatter)
    finally:
        root.handlers[:] = previous_handlers
        root.setLevel(previous_level)
        logging.getLogger(QUERY_LOGGER_NAME).setLevel(logging.NOTSET)
