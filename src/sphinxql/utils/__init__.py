"""Utility functions and helpers for sphinxql."""

from sphinxql.utils.decorators import (
    retry,
    retry_with_backoff,
    traced,
)

__all__ = [
    "retry",
    "retry_with_backoff",
    "traced",
]
