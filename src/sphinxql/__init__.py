
from sphinxql.__version__ import __version__

from sphinxql.query import (
    Query,
    QueryMetadata,
    SphinxQLCompiler,
    SQLAlchemyEntityQuery,
)
from sphinxql.connection import (
    SphinxConnection,
    SphinxManager,
    StatementResult,
)

from sphinxql.common.exceptions import SphinxQLError, ErrorCode

from sphinxql.constants import (
    ConditionOperator,
    OrderDirection,
    QueryState,
    MetadataState,
)

from sphinxql.logging import QueryLogger, setup_logging
from sphinxql.settings import SphinxSettings, get_settings

# Utils (public API)
from sphinxql.utils import (
    retry,
    traced,
)


__all__ = [
    "__version__",

    "Query",
    "QueryMetadata",
    "SphinxQLCompiler",
    "SQLAlchemyEntityQuery",

    "SphinxManager",
    "SphinxConnection",
    "StatementResult",

    # Exceptions (public API)
    "SphinxQLError",
    "ErrorCode",

    "ConditionOperator",
    "OrderDirection",
    "QueryState",
    "MetadataState",

    "QueryLogger",
    "setup_logging",
    "SphinxSettings",
    "get_settings",

    "retry",
    "traced",
]
