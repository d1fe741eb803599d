"""Context injection for log records.

Two kinds of context reach every record passing the ``ContextFilter``:

* process-wide attributes (deployment environment, cluster name ...) set
  once with ``set_logging_context``;
* caller-scoped request and user ids held in context variables, so queries
  issued on behalf of different requests stay distinguishable.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Dict, Iterator, Optional

from sphinxql.__version__ import __version__

request_id_var: ContextVar[Optional[str]] = ContextVar("sphinxql_request_id", default=None)
user_id_var: ContextVar[Optional[str]] = ContextVar("sphinxql_user_id", default=None)

_static_context: Dict[str, Any] = {}


class ContextFilter(logging.Filter):
    """Attach static, request and SDK context to each record. Never drops one."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.__dict__.update(_static_context)
        record.request_id = request_id_var.get()
        record.user_id = user_id_var.get()
        record.sdk_name = "sphinxql"
        record.sdk_version = __version__
        return True


def set_logging_context(
    environment: Optional[str] = None,
    extra: Optional[Dict[str, Any]] = None,
) -> None:
    """Replace the process-wide attributes; ``None`` for both clears them."""
    _static_context.clear()
    if environment is not None:
        _static_context["environment"] = environment
    _static_context.update(extra or {})


def set_request_context(
    request_id: Optional[str] = None,
    user_id: Optional[str] = None,
) -> None:
    if request_id is not None:
        request_id_var.set(request_id)
    if user_id is not None:
        user_id_var.set(user_id)


def clear_request_context() -> None:
    request_id_var.set(None)
    user_id_var.set(None)


@contextmanager
def request_context(request_id: Optional[str] = None, user_id: Optional[str] = None) -> Iterator[None]:
    """Scope request and user ids to a block, restoring the previous values.

    Example:
        >>> with request_context(request_id="req-42"):
        ...     query.get_results()
    """
    request_token = request_id_var.set(request_id)
    user_token = user_id_var.set(user_id)
    try:
        yield
    finally:
        user_id_var.reset(user_token)
        request_id_var.reset(request_token)
