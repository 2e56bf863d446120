"""Template payload — the document as stored in a template file."""

from datetime import datetime, timezone
from pydantic import Field

from .base import CamelModel
from .frame import Frame
from .objects import CanvasObject

TEMPLATE_VERSION = 1


class TemplateInfo(CamelModel):
    """Template metadata; the payload itself is loaded separately."""
    name: str
    path: str
    created_at: str = ""


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class TemplatePayload(CamelModel):
    """Serialized document: frame, layer list and batch table data.

    Files written before table data existed decode with an empty table.
    """
    version: int = TEMPLATE_VERSION
    name: str
    created_at: str = Field(default_factory=utc_timestamp)
    frame: Frame = Field(default_factory=Frame)
    objects: list[CanvasObject] = Field(default_factory=list)
    table_data: dict[str, dict[str, str]] = Field(default_factory=dict)

    def encode(self) -> str:
        return self.model_dump_json(by_alias=True)

    @classmethod
    def decode(cls, blob: str) -> "TemplatePayload":
        return cls.model_validate_json(blob)
