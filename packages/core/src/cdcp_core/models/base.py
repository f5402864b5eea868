"""Shared base model for wire-compatible records.

Everything persisted to the session or handed to the submission service is
exchanged in camelCase JSON. Python code uses snake_case attribute names and
either spelling is accepted on input.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model that serializes with camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_wire(self) -> dict:
        """Dump to a JSON-compatible dict using camelCase keys."""
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)
