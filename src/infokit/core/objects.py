"""Canvas object models — the typed layers placed inside a frame.

Objects form a closed union discriminated by ``type``:

- ``hero``: the primary image, exactly one once the editor is open, never deletable
- ``background``: at most one, always inserted at the bottom of the layer order
- ``text``: a text block whose ``key`` maps it to a batch-table column
- ``image``: an auxiliary image layer (icons, logos)

Geometry is stored top-left anchored in frame coordinates.
"""

import uuid
from typing import Annotated, Literal, Optional, Union, get_args
from pydantic import Field, TypeAdapter

from .base import CamelModel

ScaleMode = Literal["fill", "fit", "stretch"]
SCALE_MODES: tuple[str, ...] = get_args(ScaleMode)
FontWeight = Literal["normal", "bold"]
FontStyle = Literal["normal", "italic"]
TextAlign = Literal["left", "center", "right"]
VerticalAlign = Literal["top", "middle", "bottom"]

OBJECT_TYPES = ("hero", "background", "text", "image")

# Fields that an update may never overwrite
IMMUTABLE_FIELDS = frozenset({"id", "type"})


def new_object_id() -> str:
    return uuid.uuid4().hex[:8]


class BaseObject(CamelModel):
    """Geometry and display flags shared by every canvas object."""
    id: str = Field(default_factory=new_object_id)
    x: float = 0
    y: float = 0
    width: float = 200
    height: float = 200
    rotation: float = 0
    opacity: float = 1.0
    locked: bool = False
    visible: bool = True
    name: str = ""


class HeroObject(BaseObject):
    type: Literal["hero"] = "hero"
    name: str = "Hero image"
    src: str = ""
    original_path: str = ""


class BackgroundObject(BaseObject):
    type: Literal["background"] = "background"
    name: str = "Background"
    locked: bool = True
    src: str = ""
    original_path: Optional[str] = None
    scale_mode: ScaleMode = "fill"


class TextObject(BaseObject):
    type: Literal["text"] = "text"
    x: float = 100
    y: float = 100
    width: float = 200
    height: float = 50
    key: str = ""
    content: str = "New Text"
    font_family: str = "Inter, system-ui, sans-serif"
    font_size: float = 32
    font_weight: FontWeight = "normal"
    font_style: FontStyle = "normal"
    fill: str = "#000000"
    align: TextAlign = "left"
    vertical_align: VerticalAlign = "top"
    line_height: float = 1.2


class ImageObject(BaseObject):
    type: Literal["image"] = "image"
    x: float = 100
    y: float = 100
    src: str = ""
    original_path: Optional[str] = None


CanvasObject = Annotated[
    Union[HeroObject, BackgroundObject, TextObject, ImageObject],
    Field(discriminator="type"),
]

canvas_object_adapter = TypeAdapter(CanvasObject)
object_list_adapter = TypeAdapter(list[CanvasObject])


def parse_object(data: dict) -> CanvasObject:
    """Validate a plain dict (camelCase or snake_case keys) into its variant."""
    return canvas_object_adapter.validate_python(data)


def merge_object(obj: CanvasObject, updates: dict) -> CanvasObject:
    """Return ``obj`` with ``updates`` shallow-merged in.

    Keys may use either the field name or its camelCase alias. Unknown keys
    and the immutable ``id``/``type`` are ignored.
    """
    cls = type(obj)
    data = obj.model_dump()
    for key, value in updates.items():
        name = cls.field_name(key)
        if name is None or name in IMMUTABLE_FIELDS:
            continue
        data[name] = value
    return cls.model_validate(data)


def object_source(obj: CanvasObject) -> Optional[str]:
    """The file identity a renderer needs for ``obj``, if any."""
    if isinstance(obj, HeroObject):
        return obj.original_path
    if isinstance(obj, (BackgroundObject, ImageObject)):
        return obj.original_path or obj.src
    if isinstance(obj, TextObject):
        return None
    raise TypeError(f"Unknown canvas object variant: {type(obj).__name__}")


def describe_object(obj: CanvasObject) -> str:
    """Short human-readable detail shown next to a layer's name."""
    if isinstance(obj, HeroObject):
        return obj.original_path or obj.src
    if isinstance(obj, BackgroundObject):
        return f"{obj.scale_mode} · {obj.src}"
    if isinstance(obj, TextObject):
        snippet = (obj.content[:40] + "...") if len(obj.content) > 40 else obj.content
        return f"{obj.key}: {snippet}"
    if isinstance(obj, ImageObject):
        return obj.src
    raise TypeError(f"Unknown canvas object variant: {type(obj).__name__}")
