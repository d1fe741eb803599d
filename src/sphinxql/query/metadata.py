"""Per-query engine statistics read from ``SHOW META``."""

from typing import Any, Dict, Optional

from pydantic import Field

from sphinxql.constants.sql import MetadataState
from sphinxql.types.base import SphinxQLBaseModel


class QueryMetadata(SphinxQLBaseModel):
    """Key/value statistics reported for the last statement.

    The state separates a query that never ran (NOT_RUN) from one whose
    ``SHOW META`` follow-up failed or returned nothing (EMPTY).

    Example:
        >>> meta = QueryMetadata.from_pairs({"total_found": "42", "time": "0.003"})
        >>> meta.total_found, meta.time
        (42, 0.003)
    """
    state: MetadataState = MetadataState.NOT_RUN
    values: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def not_run(cls) -> "QueryMetadata":
        return cls()

    @classmethod
    def empty(cls) -> "QueryMetadata":
        return cls(state=MetadataState.EMPTY)

    @classmethod
    def from_pairs(cls, pairs: Optional[Dict[str, Any]]) -> "QueryMetadata":
        if not pairs:
            return cls.empty()
        return cls(state=MetadataState.POPULATED, values=dict(pairs))

    @property
    def has_run(self) -> bool:
        return self.state != MetadataState.NOT_RUN

    def get(self, name: str, default: Any = None) -> Any:
        return self.values.get(name, default)

    @property
    def total_found(self) -> int:
        """Total matches the engine found, independent of LIMIT."""
        return int(self.get("total_found", 0))

    @property
    def time(self) -> float:
        """Engine-side execution time in seconds."""
        return float(self.get("time", 0))
