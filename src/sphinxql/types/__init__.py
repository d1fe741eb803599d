"""Type definitions for sphinxql."""

from .base import SphinxQLBaseModel

__all__ = [
    'SphinxQLBaseModel',
]
