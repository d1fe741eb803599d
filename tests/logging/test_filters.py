import logging

from sphinxql.__version__ import __version__
from sphinxql.logging.filters import (
    ContextFilter,
    clear_request_context,
    request_context,
    set_logging_context,
    set_request_context,
)


def _record() -> logging.LogRecord:
    return logging.LogRecord(
        name="sphinxql.queries",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg="Sphinx query executed",
        args=(),
        exc_info=None,
    )


def test_context_filter_respects_static_environment():
    set_logging_context(environment="qa", extra={"cluster": "search-eu"})
    try:
        record = _record()
        assert ContextFilter().filter(record)
        assert getattr(record, "environment") == "qa"
        assert getattr(record, "cluster") == "search-eu"
    finally:
        set_logging_context(environment=None, extra=None)


def test_context_filter_uses_request_context():
    set_logging_context(environment=None, extra=None)
    set_request_context(request_id="req-1", user_id="user-7")
    try:
        record = _record()
        assert ContextFilter().filter(record)
        assert record.request_id == "req-1"
        assert record.user_id == "user-7"
    finally:
        clear_request_context()


def test_context_filter_no_config_is_graceful():
    set_logging_context(environment=None, extra=None)
    record = _record()
    assert ContextFilter().filter(record)
    assert not hasattr(record, "environment")
    assert record.request_id is None


def test_context_filter_tags_sdk():
    record = _record()
    ContextFilter().filter(record)
    assert record.sdk_name == "sphinxql"
    assert record.sdk_version == __version__


def test_request_context_restores_previous_values():
    set_request_context(request_id="outer")
    try:
        with request_context(request_id="inner", user_id="user-1"):
            record = _record()
            ContextFilter().filter(record)
            assert record.request_id == "inner"
            assert record.user_id == "user-1"

        record = _record()
        ContextFilter().filter(record)
        assert record.request_id == "outer"
        assert record.user_id is None
    finally:
        clear_request_context()
