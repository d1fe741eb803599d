"""Statement result returned by a connection."""

from typing import Any, Dict, List

from pydantic import Field

from sphinxql.types.base import SphinxQLBaseModel


class StatementResult(SphinxQLBaseModel):
    """Outcome of a single successfully executed statement.

    Attributes:
        rows: Fetched rows as column-name keyed mappings (empty when the
            statement returns no rows)
        row_count: Rows returned or affected as reported by the driver
        returns_rows: Whether the statement produced a result set
        duration_seconds: Wall-clock time spent in the driver
    """
    rows: List[Dict[str, Any]] = Field(default_factory=list)
    row_count: int = Field(default=0)
    returns_rows: bool = Field(default=False)
    duration_seconds: float = Field(default=0.0, ge=0.0)

    def key_pairs(self) -> Dict[str, Any]:
        """Fold a two-column result into a flat mapping (first column → second)."""
        pairs: Dict[str, Any] = {}
        for row in self.rows:
            values = list(row.values())
            if len(values) >= 2:
                pairs[str(values[0])] = values[1]
        return pairs
