import time
from typing import Any, Dict, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from sphinxql.common.exceptions import SphinxQLError, connection_error
from sphinxql.connection.connection import SphinxConnection
from sphinxql.logging import QueryLogger, get_logger
from sphinxql.protocols.providers import QueryLoggerProtocol, ThrottlerFactory
from sphinxql.query import Query
from sphinxql.settings import SphinxSettings, get_settings
from sphinxql.utils.decorators import retry_with_backoff, traced

logger = get_logger(__name__)


class SphinxManager:
    """Owns the connection to the search engine and hands out queries.

    The engine and the connection are created lazily on first use and then
    shared by every query the manager creates.

    Args:
        settings: Connection settings; the process-wide settings by default
        query_logger: Logger every query reports to; a fresh QueryLogger by
            default
        throttler_factory: Optional throttler source passed to each query

    Example:
        >>> manager = SphinxManager()
        >>> query = manager.create_query().select("id").from_("articles")
        >>> query.get_results()
        [{'id': 1}, {'id': 7}]
        >>> manager.close_connection()
    """

    def __init__(
        self,
        settings: Optional[SphinxSettings] = None,
        query_logger: Optional[QueryLoggerProtocol] = None,
        throttler_factory: Optional[ThrottlerFactory] = None,
    ):
        self.settings = settings or get_settings()
        self.query_logger = query_logger if query_logger is not None else QueryLogger()
        self.throttler_factory = throttler_factory
        self._engine: Optional[Engine] = None
        self._connection: Optional[SphinxConnection] = None

    @property
    def engine(self) -> Engine:
        """Get or create the SQLAlchemy engine."""
        if self._engine is None:
            self._engine = self._create_engine()
        return self._engine

    def _create_engine(self) -> Engine:
        try:
            engine = create_engine(
                self.settings.url,
                pool_pre_ping=self.settings.pool_pre_ping,
                connect_args={"connect_timeout": self.settings.connect_timeout},
            )
        except Exception as exc:
            raise connection_error(
                "Failed to create Sphinx engine",
                service="sphinx",
                host=self.settings.host,
                cause=exc,
                is_retryable=False,
            )

        logger.info(
            "Created Sphinx engine",
            extra={"host": self.settings.host, "port": self.settings.port},
        )
        return engine

    @traced(
        span_name="sphinxql.connection.connect",
        attribute_getter=lambda self: {
            "db.system": "sphinx",
            "net.peer.name": self.settings.host,
            "net.peer.port": self.settings.port,
        },
    )
    def _open_connection(self) -> SphinxConnection:
        start_time = time.time()
        try:
            connection = self.engine.connect()
        except SphinxQLError:
            raise
        except Exception as exc:
            raise connection_error(
                f"Failed to connect to Sphinx at {self.settings.host}:{self.settings.port}",
                service="sphinx",
                host=self.settings.host,
                cause=exc,
            )

        duration = time.time() - start_time
        logger.info(
            "Connected to Sphinx",
            extra={"host": self.settings.host, "duration.seconds": f"{duration:.6f}"},
        )
        return SphinxConnection(connection)

    @property
    def connection(self) -> SphinxConnection:
        """Return the shared connection, establishing it when needed."""
        if self._connection is None or self._connection.closed:
            connect = retry_with_backoff(
                max_retries=self.settings.max_retries,
                initial_delay=self.settings.retry_delay_seconds,
                retry_condition=lambda exc: getattr(exc, "is_retryable", False),
            )(self._open_connection)
            self._connection = connect()
        return self._connection

    def create_query(self, query: Optional[str] = None) -> Query:
        """Create a new query bound to the shared connection.

        Args:
            query: Optional literal statement executed instead of the builder
        """
        return Query(
            self.connection,
            self.query_logger,
            query,
            throttler_factory=self.throttler_factory,
            max_matches=self.settings.max_matches,
        )

    def close_connection(self) -> None:
        """Close the shared connection and dispose of the engine pool."""
        if self._connection is not None:
            self._connection.close()
            self._connection = None

        if self._engine is not None:
            self._engine.dispose()
            self._engine = None

    def get_connection_info(self) -> Dict[str, Any]:
        return {
            "platform": "sphinx",
            "host": self.settings.host,
            "port": self.settings.port,
            "connected": self._connection is not None and not self._connection.closed,
        }

    def __enter__(self) -> "SphinxManager":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close_connection()
