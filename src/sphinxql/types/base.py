"""Base model for sphinxql value types."""

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict


class SphinxQLBaseModel(BaseModel):
    """Pydantic base for clause, result and metadata models.

    Assignments are validated, so a model cannot drift out of shape after
    construction.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, validate_assignment=True)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready dictionary: enums become values, tuples become lists, None fields are dropped."""
        return self.model_dump(mode="json", exclude_none=True)
