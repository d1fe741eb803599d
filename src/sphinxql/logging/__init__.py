"""Logging infrastructure for sphinxql.

This module provides structured logging with JSON output, context tracking,
and the query logger that records every statement sent to the engine.
"""

from sphinxql.logging.filters import (
    ContextFilter,
    clear_request_context,
    request_context,
    set_logging_context,
    set_request_context,
)
from sphinxql.logging.logger import QUERY_LOGGER_NAME, CustomJsonFormatter, get_logger, setup_logging
from sphinxql.logging.query_logger import LoggedQuery, QueryLogger

__all__ = [
    "get_logger",
    "QUERY_LOGGER_NAME",
    "setup_logging",
    "CustomJsonFormatter",
    "ContextFilter",
    "set_logging_context",
    "set_request_context",
    "clear_request_context",
    "request_context",
    "QueryLogger",
    "LoggedQuery",
]
