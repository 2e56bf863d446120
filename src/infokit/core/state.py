"""Editor state and the store that mutates it.

``EditorStore`` is the single owner of the document. Every edit goes
through one of its methods, each of which runs to completion
synchronously and then notifies subscribers with the names of the state
slices it changed. Readers get deep copies, never the live state.

Edits that reference a missing object are no-ops, not errors.
"""

import logging
from typing import Callable, Iterable, Literal, Optional, Sequence, Union
from pydantic import BaseModel, Field, ValidationError

from . import table as table_ops
from . import viewport
from .frame import Frame
from .geometry import from_drag_result, from_resize_result, round_half_up
from .layers import LayerStack
from .objects import (
    BackgroundObject,
    CanvasObject,
    HeroObject,
    ImageObject,
    TextObject,
    merge_object,
    new_object_id,
)
from .templates import TemplateInfo, TemplatePayload
from ..host.bridge import ImageFile

logger = logging.getLogger("InfographicEditor.core.state")

FRAME_ID = "__FRAME__"
DUPLICATE_OFFSET = 20

AppPhase = Literal["startup", "gallery", "editor"]
HorizontalAlignment = Literal["left", "center", "right"]
VerticalAlignment = Literal["top", "middle", "bottom"]

# State slices reported to subscribers
FRAME = "frame"
OBJECTS = "objects"
SELECTION = "selection"
ZOOM = "zoom"
TABLE_DATA = "table_data"
IMAGES = "images"
PHASE = "phase"
TEMPLATES = "templates"
CURRENT_TEMPLATE = "current_template"
WORKING_DIRECTORY = "working_directory"

Listener = Callable[["EditorStore", frozenset], None]


class EditorState(BaseModel):
    """Everything the editor knows about the current session."""
    phase: AppPhase = "startup"
    working_directory: Optional[str] = None
    working_directory_name: Optional[str] = None
    all_images: list[ImageFile] = Field(default_factory=list)
    selected_image_paths: list[str] = Field(default_factory=list)
    frame: Frame = Field(default_factory=Frame)
    layers: LayerStack = Field(default_factory=LayerStack)
    selected_ids: list[str] = Field(default_factory=list)
    zoom: float = 1.0
    templates: list[TemplateInfo] = Field(default_factory=list)
    table_data: dict[str, dict[str, str]] = Field(default_factory=dict)
    current_template_name: Optional[str] = None


class EditorStore:
    """Owns an ``EditorState`` and exposes every document edit."""

    def __init__(self, state: Optional[EditorState] = None):
        self._state = state or EditorState()
        self._listeners: list[Listener] = []

    # ── Subscriptions ───────────────────────────────────────────────────

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener``; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, *changed: str):
        if not changed:
            return
        slices = frozenset(changed)
        for listener in list(self._listeners):
            try:
                listener(self, slices)
            except Exception:
                logger.exception(f"Store listener failed for change {sorted(slices)}")

    # ── Read access ─────────────────────────────────────────────────────

    @property
    def state(self) -> EditorState:
        """Deep-copied snapshot of the whole state."""
        return self._state.model_copy(deep=True)

    @property
    def frame(self) -> Frame:
        return self._state.frame.model_copy()

    @property
    def objects(self) -> list[CanvasObject]:
        return [o.model_copy(deep=True) for o in self._state.layers.objects]

    @property
    def selected_ids(self) -> list[str]:
        return list(self._state.selected_ids)

    @property
    def zoom(self) -> float:
        return self._state.zoom

    @property
    def phase(self) -> AppPhase:
        return self._state.phase

    @property
    def working_directory(self) -> Optional[str]:
        return self._state.working_directory

    @property
    def current_template_name(self) -> Optional[str]:
        return self._state.current_template_name

    @property
    def templates(self) -> list[TemplateInfo]:
        return [t.model_copy() for t in self._state.templates]

    @property
    def table_data(self) -> dict[str, dict[str, str]]:
        return {path: dict(row) for path, row in self._state.table_data.items()}

    @property
    def is_frame_selected(self) -> bool:
        return self._state.selected_ids == [FRAME_ID]

    def get_object(self, object_id: str) -> Optional[CanvasObject]:
        obj = self._state.layers.get(object_id)
        return obj.model_copy(deep=True) if obj else None

    def hero(self) -> Optional[HeroObject]:
        heroes = self._state.layers.of_type("hero")
        return heroes[0].model_copy(deep=True) if heroes else None

    def background(self) -> Optional[BackgroundObject]:
        backgrounds = self._state.layers.of_type("background")
        return backgrounds[0].model_copy(deep=True) if backgrounds else None

    def selected_objects(self) -> list[CanvasObject]:
        layers = self._state.layers
        return [
            obj.model_copy(deep=True)
            for obj in (layers.get(i) for i in self._state.selected_ids)
            if obj is not None
        ]

    def text_layers(self, visible_only: bool = True) -> list[TextObject]:
        if visible_only:
            texts = table_ops.table_columns(self._state.layers.objects)
        else:
            texts = self._state.layers.of_type("text")
        return [t.model_copy(deep=True) for t in texts]

    def layer_summary(self) -> list[dict]:
        return self._state.layers.to_summary()

    # ── Working directory & images ──────────────────────────────────────

    def set_phase(self, phase: AppPhase):
        if self._state.phase != phase:
            self._state.phase = phase
            self._notify(PHASE)

    def set_working_directory(self, path: str, name: str):
        self._state.working_directory = path
        self._state.working_directory_name = name
        self._notify(WORKING_DIRECTORY)

    def clear_working_directory(self):
        self._state.working_directory = None
        self._state.working_directory_name = None
        self._state.all_images = []
        self._state.selected_image_paths = []
        self._notify(WORKING_DIRECTORY, IMAGES)

    def set_all_images(self, images: Sequence[ImageFile]):
        """Replace the image list; every image starts selected."""
        self._state.all_images = [img.model_copy() for img in images]
        self._state.selected_image_paths = [img.path for img in images]
        self._notify(IMAGES)

    def toggle_image_selection(self, path: str):
        selected = self._state.selected_image_paths
        if path in selected:
            selected.remove(path)
        else:
            selected.append(path)
        self._notify(IMAGES)

    def select_all_images(self):
        self._state.selected_image_paths = [img.path for img in self._state.all_images]
        self._notify(IMAGES)

    def deselect_all_images(self):
        self._state.selected_image_paths = []
        self._notify(IMAGES)

    @property
    def all_images(self) -> list[ImageFile]:
        return [img.model_copy() for img in self._state.all_images]

    @property
    def selected_image_paths(self) -> list[str]:
        return list(self._state.selected_image_paths)

    def selected_images(self) -> list[ImageFile]:
        """Selected images in directory order, the order rows are shown and generated."""
        selected = set(self._state.selected_image_paths)
        return [img.model_copy() for img in self._state.all_images if img.path in selected]

    def proceed_to_editor(self):
        """Make the first selected image the hero and enter the editor phase."""
        first = next(iter(self.selected_images()), None)
        changed = [PHASE]
        if first is not None:
            layers = self._state.layers
            layers.remove_type("hero")
            frame = self._state.frame
            layers.insert_bottom(HeroObject(
                x=0,
                y=0,
                width=frame.width,
                height=frame.height,
                src=first.thumbnail_url,
                original_path=first.path,
            ))
            changed.append(OBJECTS)
        else:
            logger.info("No images selected; entering the editor without a hero")
        self._state.phase = "editor"
        self._notify(*changed)

    def replace_hero_image(self, src: str, original_path: str):
        heroes = self._state.layers.of_type("hero")
        if not heroes:
            return
        hero = heroes[0]
        self._state.layers.replace(hero.model_copy(update={"src": src, "original_path": original_path}))
        self._notify(OBJECTS)

    # ── Frame ───────────────────────────────────────────────────────────

    def set_frame(self, updates: dict):
        """Shallow-merge ``updates`` into the frame.

        Width and height are not validated, and changing them does not
        reset ``aspect_ratio`` to ``custom``.
        Values the frame model rejects leave the frame unchanged.
        """
        frame = self._state.frame
        data = frame.model_dump()
        for key, value in updates.items():
            name = Frame.field_name(key)
            if name is not None:
                data[name] = value
        try:
            new_frame = Frame.model_validate(data)
        except ValidationError as e:
            logger.warning(f"set_frame: rejected frame update {updates}: {e}")
            return
        if new_frame != frame:
            self._state.frame = new_frame
            self._notify(FRAME)

    def set_aspect_ratio(self, ratio: str):
        """Switch to a named preset (its dimensions) or to ``custom``. Unknown ratios are ignored."""
        try:
            new_frame = self._state.frame.apply_preset(ratio)
        except ValueError as e:
            logger.warning(f"set_aspect_ratio: {e}")
            return
        if new_frame != self._state.frame:
            self._state.frame = new_frame
            self._notify(FRAME)

    # ── Objects ─────────────────────────────────────────────────────────

    def add_text(self, text: Optional[dict] = None) -> str:
        """Append a text layer and select it; returns its id.

        ``key`` defaults to ``TEXT-<n>`` and ``name`` to ``Text <n>`` where
        ``n`` is one more than the number of existing text layers.
        """
        key_number = self._state.layers.count("text") + 1
        obj = merge_object(TextObject(), text or {})
        obj = obj.model_copy(update={
            "key": obj.key or f"TEXT-{key_number}",
            "name": obj.name or f"Text {key_number}",
        })
        self._state.layers.append(obj)
        self._state.selected_ids = [obj.id]
        self._notify(OBJECTS, SELECTION)
        return obj.id

    def add_image(self, src: str, name: Optional[str] = None,
                  original_path: Optional[str] = None) -> str:
        existing = self._state.layers.count("image")
        obj = ImageObject(
            x=100,
            y=100,
            width=200,
            height=200,
            name=name or f"Image {existing + 1}",
            src=src,
            original_path=original_path,
        )
        self._state.layers.append(obj)
        self._state.selected_ids = [obj.id]
        self._notify(OBJECTS, SELECTION)
        return obj.id

    def set_background(self, src: str, original_path: Optional[str] = None) -> str:
        """Replace any background with a full-frame, locked one at the bottom."""
        layers = self._state.layers
        layers.remove_type("background")
        frame = self._state.frame
        obj = BackgroundObject(
            x=0,
            y=0,
            width=frame.width,
            height=frame.height,
            src=src,
            original_path=original_path,
        )
        layers.insert_bottom(obj)
        self._notify(OBJECTS)
        return obj.id

    def update_object(self, object_id: str, updates: dict) -> bool:
        """Merge ``updates`` into an object; returns True if it changed.

        Updates the object model rejects are logged and leave it unchanged.
        """
        obj = self._state.layers.get(object_id)
        if obj is None:
            logger.debug(f"update_object: no object {object_id}")
            return False
        try:
            updated = merge_object(obj, updates)
        except ValidationError as e:
            logger.warning(f"update_object: rejected update for {object_id}: {e}")
            return False
        if updated == obj:
            return False
        self._state.layers.replace(updated)
        self._notify(OBJECTS)
        return True

    def delete_object(self, object_id: str) -> bool:
        """Remove an object and drop it from the selection. The hero is never removed."""
        obj = self._state.layers.get(object_id)
        if obj is None:
            return False
        if isinstance(obj, HeroObject):
            logger.debug(f"Refusing to delete hero object {object_id}")
            return False
        self._state.layers.remove(object_id)
        changed = [OBJECTS]
        if object_id in self._state.selected_ids:
            self._state.selected_ids = [i for i in self._state.selected_ids if i != object_id]
            changed.append(SELECTION)
        self._notify(*changed)
        return True

    def delete_selected(self) -> int:
        removed = 0
        for object_id in list(self._state.selected_ids):
            if self.delete_object(object_id):
                removed += 1
        return removed

    def duplicate_object(self, object_id: str) -> Optional[str]:
        """Copy an object offset by (20, 20) and select the copy; returns its id.

        A copied text layer gets ``TEXT-<n+1>`` for ``n`` existing text
        layers, which can repeat a key already in use.
        Duplicating the hero produces a second hero layer.
        """
        obj = self._state.layers.get(object_id)
        if obj is None:
            return None
        update = {
            "id": new_object_id(),
            "name": f"{obj.name} copy",
            "x": obj.x + DUPLICATE_OFFSET,
            "y": obj.y + DUPLICATE_OFFSET,
        }
        if isinstance(obj, TextObject):
            update["key"] = f"TEXT-{self._state.layers.count('text') + 1}"
        duplicate = obj.model_copy(update=update, deep=True)
        self._state.layers.append(duplicate)
        self._state.selected_ids = [duplicate.id]
        self._notify(OBJECTS, SELECTION)
        return duplicate.id

    # ── Interactive edits ───────────────────────────────────────────────

    def apply_drag(self, object_id: str, center_x: float, center_y: float) -> bool:
        """Store the result of dragging a node whose centre ended at the given point."""
        obj = self._state.layers.get(object_id)
        if obj is None or obj.locked:
            return False
        x, y = from_drag_result(center_x, center_y, obj.width, obj.height)
        return self.update_object(object_id, {"x": x, "y": y})

    def apply_transform(self, object_id: str, scale_x: float, scale_y: float,
                        center_x: float, center_y: float, rotation: float) -> bool:
        """Bake an interactive scale/rotate into the object's stored geometry."""
        obj = self._state.layers.get(object_id)
        if obj is None:
            return False
        result = from_resize_result(obj.width, obj.height, scale_x, scale_y,
                                    center_x, center_y, rotation)
        return self.update_object(object_id, {
            "x": result.x,
            "y": result.y,
            "width": result.width,
            "height": result.height,
            "rotation": result.rotation,
        })

    # ── Selection ───────────────────────────────────────────────────────

    def _set_selection(self, ids: list[str]):
        if ids != self._state.selected_ids:
            self._state.selected_ids = ids
            self._notify(SELECTION)

    def select_object(self, object_id: Optional[str]):
        self._set_selection([object_id] if object_id else [])

    def select_multiple(self, object_ids: Iterable[str]):
        self._set_selection(list(object_ids))

    def select_frame(self):
        self._set_selection([FRAME_ID])

    def clear_selection(self):
        self._set_selection([])

    # ── Layer order ─────────────────────────────────────────────────────

    def reorder_objects(self, from_index: int, to_index: int):
        if self._state.layers.reorder(from_index, to_index):
            self._notify(OBJECTS)

    def move_to_front(self, object_id: str):
        if self._state.layers.move_to_front(object_id):
            self._notify(OBJECTS)

    def move_to_back(self, object_id: str):
        if self._state.layers.move_to_back(object_id):
            self._notify(OBJECTS)

    # ── Alignment ───────────────────────────────────────────────────────

    def _alignable(self) -> list[CanvasObject]:
        layers = self._state.layers
        return [
            obj for obj in (layers.get(i) for i in self._state.selected_ids)
            if obj is not None and not obj.locked
        ]

    def align_horizontal(self, alignment: HorizontalAlignment):
        frame_width = self._state.frame.width
        changed = False
        for obj in self._alignable():
            if alignment == "left":
                new_x = 0
            elif alignment == "center":
                new_x = (frame_width - obj.width) / 2
            elif alignment == "right":
                new_x = frame_width - obj.width
            else:
                raise ValueError(f"Unknown horizontal alignment: {alignment!r}")
            new_x = round_half_up(new_x)
            if new_x != obj.x:
                self._state.layers.replace(obj.model_copy(update={"x": new_x}))
                changed = True
        if changed:
            self._notify(OBJECTS)

    def align_vertical(self, alignment: VerticalAlignment):
        frame_height = self._state.frame.height
        changed = False
        for obj in self._alignable():
            if alignment == "top":
                new_y = 0
            elif alignment == "middle":
                new_y = (frame_height - obj.height) / 2
            elif alignment == "bottom":
                new_y = frame_height - obj.height
            else:
                raise ValueError(f"Unknown vertical alignment: {alignment!r}")
            new_y = round_half_up(new_y)
            if new_y != obj.y:
                self._state.layers.replace(obj.model_copy(update={"y": new_y}))
                changed = True
        if changed:
            self._notify(OBJECTS)

    # ── Zoom ────────────────────────────────────────────────────────────

    def _set_zoom_value(self, zoom: float):
        if zoom != self._state.zoom:
            self._state.zoom = zoom
            self._notify(ZOOM)

    def set_zoom(self, zoom: float):
        self._set_zoom_value(viewport.clamp_zoom(zoom))

    def zoom_in(self):
        self._set_zoom_value(viewport.step_zoom(self._state.zoom, viewport.ZOOM_STEP))

    def zoom_out(self):
        self._set_zoom_value(viewport.step_zoom(self._state.zoom, -viewport.ZOOM_STEP))

    def reset_zoom(self):
        self._set_zoom_value(1.0)

    def fit_to_view(self, container_width: float, container_height: float):
        frame = self._state.frame
        self._set_zoom_value(viewport.fit_zoom(container_width, container_height,
                                               frame.width, frame.height))

    # ── Batch table ─────────────────────────────────────────────────────

    def initialize_table_data(self):
        """Fill missing cells for every selected image and visible text layer."""
        columns = table_ops.table_columns(self._state.layers.objects)
        paths = [img.path for img in self.selected_images()]
        if table_ops.initialize_rows(self._state.table_data, paths, columns):
            self._notify(TABLE_DATA)

    def set_table_text_value(self, image_path: str, key: str, value: str):
        if table_ops.set_cell(self._state.table_data, image_path, key, value):
            self._notify(TABLE_DATA)

    def set_table_text_column(self, key: str, values: Union[str, Sequence[str]]):
        """Assign pasted values down a column, one per selected image in order."""
        paths = [img.path for img in self.selected_images()]
        if table_ops.fill_column(self._state.table_data, key, paths, values):
            self._notify(TABLE_DATA)

    def table_rows(self) -> list[dict]:
        columns = table_ops.table_columns(self._state.layers.objects)
        paths = [img.path for img in self.selected_images()]
        return table_ops.to_rows(self._state.table_data, paths, columns)

    # ── Templates ───────────────────────────────────────────────────────

    def set_templates(self, templates: Sequence[TemplateInfo]):
        self._state.templates = [t.model_copy() for t in templates]
        self._notify(TEMPLATES)

    def to_payload(self, name: str) -> TemplatePayload:
        """Snapshot the document as a template payload."""
        return TemplatePayload(
            name=name,
            frame=self._state.frame.model_copy(),
            objects=self.objects,
            table_data=self.table_data,
        )

    def load_document(self, payload: TemplatePayload):
        """Replace frame, layers and table data wholesale and bind the template name."""
        self._state.frame = payload.frame.model_copy()
        self._state.layers = LayerStack(objects=[o.model_copy(deep=True) for o in payload.objects])
        self._state.table_data = {path: dict(row) for path, row in payload.table_data.items()}
        self._state.selected_ids = []
        self._state.current_template_name = payload.name
        self._notify(FRAME, OBJECTS, TABLE_DATA, SELECTION, CURRENT_TEMPLATE)

    def set_current_template(self, name: Optional[str]):
        if name != self._state.current_template_name:
            self._state.current_template_name = name
            self._notify(CURRENT_TEMPLATE)

    def clear_current_template(self):
        self.set_current_template(None)

    # ── Reset ───────────────────────────────────────────────────────────

    def reset_editor(self):
        """Back to a default frame with no objects, no selection and 100% zoom."""
        self._state.frame = Frame()
        self._state.layers = LayerStack()
        self._state.selected_ids = []
        self._state.zoom = 1.0
        self._notify(FRAME, OBJECTS, SELECTION, ZOOM)
