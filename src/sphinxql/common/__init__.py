"""Common exceptions for sphinxql.

Exception Design:
    The exception system uses error codes for categorization rather than
    numerous specific exception classes. Every error raised by the package
    is a SphinxQLError carrying an ErrorCode and structured details.
"""

from sphinxql.common.exceptions import (
    SphinxQLError,
    ErrorCode,
    # Helper functions
    configuration_error,
    invalid_argument_error,
    invalid_state_error,
    connection_error,
    query_execution_error,
    hydration_error,
)

__all__ = [
    # Base Exception and Error Codes
    "SphinxQLError",
    "ErrorCode",
    # Helper functions
    "configuration_error",
    "invalid_argument_error",
    "invalid_state_error",
    "connection_error",
    "query_execution_error",
    "hydration_error",
]
