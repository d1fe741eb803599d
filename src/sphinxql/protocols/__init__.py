"""Protocol definitions for sphinxql.

Protocols provide type-safe interfaces without requiring inheritance,
following Python's structural subtyping (duck typing with type hints).
"""

from .providers import (
    ConnectionProtocol,
    EntityQueryProtocol,
    QueryLoggerProtocol,
    Throttler,
    ThrottlerFactory,
)

__all__ = [
    "ConnectionProtocol",
    "QueryLoggerProtocol",
    "Throttler",
    "ThrottlerFactory",
    "EntityQueryProtocol",
]
