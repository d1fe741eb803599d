"""Error type for sphinxql.

Every failure is a ``SphinxQLError``; the ``ErrorCode`` says what went wrong.
Callers branch on the code instead of catching a family of subclasses::

    try:
        query.get_num_rows()
    except SphinxQLError as exc:
        if exc.error_code is ErrorCode.INVALID_STATE:
            query.execute()

Builder and compiler mistakes (INVALID_ARGUMENT) and premature accessor calls
(INVALID_STATE) surface to the caller. QUERY_EXECUTION_ERROR is raised by the
connection and absorbed by ``Query.execute``.
"""

from enum import Enum
from typing import Any, Dict, Optional

from sphinxql.logging.logger import get_logger

logger = get_logger(__name__)


class ErrorCode(Enum):
    """Error categories, prefixed by area."""

    CONFIG_ERROR = "CONFIG_001"
    INVALID_ARGUMENT = "VALIDATION_001"
    INVALID_STATE = "STATE_001"
    CONNECTION_ERROR = "CONNECTION_001"
    QUERY_EXECUTION_ERROR = "EXECUTION_001"
    HYDRATION_ERROR = "HYDRATION_001"


class SphinxQLError(Exception):
    """Error raised by sphinxql.

    The error is logged when it is created, with its code and details as
    structured fields.

    Attributes:
        message: Human readable description
        error_code: Category of the failure
        details: Structured context (offending argument, statement, host ...)
        cause: Underlying exception, if any
        is_retryable: Whether repeating the operation may succeed
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.QUERY_EXECUTION_ERROR,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        is_retryable: bool = False,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.cause = cause
        self.is_retryable = is_retryable

        logger.error(
            message,
            extra={
                "error_code": error_code.value,
                "details": self.details,
                "is_retryable": is_retryable,
            },
            exc_info=cause,
        )

    def __str__(self) -> str:
        text = f"[{self.error_code.value}] {self.message}"
        if self.cause is not None:
            text += f" (caused by: {type(self.cause).__name__}: {self.cause})"
        return text

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": type(self).__name__,
            "message": self.message,
            "error_code": self.error_code.value,
            "error_name": self.error_code.name,
            "details": self.details,
            "is_retryable": self.is_retryable,
        }


def _error(
    error_code: ErrorCode,
    message: str,
    context: Dict[str, Any],
    kwargs: Dict[str, Any],
) -> SphinxQLError:
    """Merge non-None ``context`` into ``details`` and build the error."""
    details = dict(kwargs.pop("details", None) or {})
    details.update({key: value for key, value in context.items() if value is not None})
    return SphinxQLError(message, error_code=error_code, details=details, **kwargs)


def _truncate_query(query: str, limit: int = 500) -> str:
    return query if len(query) <= limit else f"{query[:limit]}..."


def configuration_error(message: str, config_key: Optional[str] = None, **kwargs) -> SphinxQLError:
    return _error(ErrorCode.CONFIG_ERROR, message, {"config_key": config_key}, kwargs)


def invalid_argument_error(
    message: str,
    argument: Optional[str] = None,
    value: Any = None,
    **kwargs,
) -> SphinxQLError:
    """Builder or compiler rejected its input.

    Args:
        message: Error message
        argument: Name of the offending argument
        value: Offending value, stored as text
    """
    context = {"argument": argument, "value": None if value is None else str(value)}
    return _error(ErrorCode.INVALID_ARGUMENT, message, context, kwargs)


def invalid_state_error(message: str, state: Optional[str] = None, **kwargs) -> SphinxQLError:
    """An accessor was called before the data it returns exists."""
    return _error(ErrorCode.INVALID_STATE, message, {"state": state}, kwargs)


def connection_error(
    message: str,
    service: Optional[str] = None,
    host: Optional[str] = None,
    **kwargs,
) -> SphinxQLError:
    """The engine could not be reached. Retryable unless stated otherwise."""
    kwargs.setdefault("is_retryable", True)
    return _error(ErrorCode.CONNECTION_ERROR, message, {"service": service, "host": host}, kwargs)


def query_execution_error(query: str, original_error: Exception, **kwargs) -> SphinxQLError:
    """The engine rejected a statement or the transport failed mid-statement.

    Args:
        query: Statement text, kept in the details (first 500 characters)
        original_error: Driver exception
    """
    kwargs["cause"] = original_error
    return _error(
        ErrorCode.QUERY_EXECUTION_ERROR,
        f"Query execution failed: {original_error}",
        {"query": _truncate_query(query)},
        kwargs,
    )


def hydration_error(message: str, column: Optional[str] = None, **kwargs) -> SphinxQLError:
    return _error(ErrorCode.HYDRATION_ERROR, message, {"column": column}, kwargs)
