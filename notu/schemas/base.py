"""
Base Schemas.

Shared configuration for models that cross the wire or the local cache.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """
    Base for every remote/cached record.

    Python attributes are snake_case, the wire is camelCase. Either form is
    accepted on input; unknown fields are dropped.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_wire(self, **kwargs) -> dict:
        """Dump with wire (camelCase) names, JSON-safe."""
        return self.model_dump(mode="json", by_alias=True, **kwargs)
