"""Shared pydantic base for models persisted in template files."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Model serialized with camelCase keys, accepting either spelling on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @classmethod
    def field_name(cls, key: str) -> str | None:
        """Map a field name or its camelCase alias to the field name."""
        if key in cls.model_fields:
            return key
        for name, info in cls.model_fields.items():
            if info.alias == key:
                return name
        return None

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")
