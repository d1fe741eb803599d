"""Connection handling for the search engine.

``SphinxConnection`` wraps a live SQLAlchemy connection; ``SphinxManager``
owns it, creating it lazily, and hands out queries bound to it.
"""

from sphinxql.connection.result import StatementResult
from sphinxql.connection.connection import SphinxConnection, quote_literal
from sphinxql.connection.manager import SphinxManager

__all__ = [
    "StatementResult",
    "SphinxConnection",
    "SphinxManager",
    "quote_literal",
]
