"""Structured logging for sphinxql.

Records are emitted as one JSON object per line. Everything passed through
``extra=`` (``db.statement``, ``row_count``, ``duration.seconds`` ...) lands
as a top-level key, alongside the context added by ``ContextFilter`` and the
active OpenTelemetry trace and span ids.

Statement logs go to the ``sphinxql.queries`` logger, which ``setup_logging``
can place at its own level so query tracing is toggled independently of the
rest of the package.
"""

from __future__ import annotations

import json
import logging
import logging.config
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Set

QUERY_LOGGER_NAME = "sphinxql.queries"

# Statements longer than this are cut in log output
MAX_STATEMENT_LENGTH = 4096

_STANDARD_ATTRIBUTES: Set[str] = set(
    logging.LogRecord("probe", logging.INFO, __file__, 0, "", (), None).__dict__
) | {"asctime", "message"}


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def _truncate_statement(value: Any) -> Any:
    if isinstance(value, str) and len(value) > MAX_STATEMENT_LENGTH:
        return f"{value[:MAX_STATEMENT_LENGTH - 3]}..."
    return value


class CustomJsonFormatter(logging.Formatter):
    """Render a record and its extra fields as a JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key in _STANDARD_ATTRIBUTES or key in payload:
                continue
            if key == "otelTraceID":
                payload["trace_id"] = value
            elif key == "otelSpanID":
                payload["span_id"] = value
            elif key == "db.statement":
                payload[key] = _truncate_statement(value)
            else:
                payload[key] = value

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str)


def setup_logging(level: Optional[str] = None, query_level: Optional[str] = None) -> None:
    """Install JSON logging on stdout through ``logging.config.dictConfig``.

    Args:
        level: Root log level; defaults to the ``log_level`` setting
        query_level: Level of the ``sphinxql.queries`` logger; defaults to
            ``level``. Use ``"WARNING"`` to silence per-statement records.
    """
    if level is None:
        from sphinxql.settings import get_settings

        level = get_settings().log_level

    level = level.upper()
    query_level = (query_level or level).upper()

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "sphinxql_json": {"()": "sphinxql.logging.logger.CustomJsonFormatter"},
            },
            "filters": {
                "sphinxql_context": {"()": "sphinxql.logging.filters.ContextFilter"},
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "sphinxql_json",
                    "filters": ["sphinxql_context"],
                    "stream": "ext://sys.stdout",
                },
            },
            "loggers": {
                QUERY_LOGGER_NAME: {"level": query_level},
            },
            "root": {"level": level, "handlers": ["console"]},
        }
    )
