"""Infographic Editor MCP Server - MCP tools for composing and batch-generating infographics."""

from mcp.server.fastmcp import FastMCP, Context
import json
import logging
from contextlib import asynccontextmanager
from dataclasses import asdict
from typing import AsyncIterator, Dict, Any, Optional
from pydantic import ValidationError

from infokit.config import EditorSettings
from infokit.core.fonts import fetch_system_fonts
from infokit.core.generation import GenerationCoordinator
from infokit.core.frame import ASPECT_RATIOS
from infokit.core.geometry import place_image
from infokit.core.objects import SCALE_MODES, merge_object
from infokit.core.persistence import TemplatePersistence
from infokit.core.shortcuts import KeyPress, handle_key
from infokit.core.state import EditorStore
from infokit.core.viewport import zoom_percent
from infokit.core.workspace import open_working_directory
from infokit.errors import InfokitError
from infokit.host.local import LocalHost, read_image_size
from infokit.host.renderer import RendererConnection

# Configure logging
logging.basicConfig(level=logging.INFO,
                    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger("InfographicEditor")


# ── Global State ────────────────────────────────────────────────────────

_settings = EditorSettings.from_env()
_host = LocalHost(renderer=RendererConnection(host=_settings.renderer_host,
                                              port=_settings.renderer_port))
_store = EditorStore()
_persistence = TemplatePersistence(_store, _host, autosave_delay=_settings.autosave_delay)
_generation = GenerationCoordinator(_store, _host)


def _document_json() -> str:
    state = _store.state
    return json.dumps({
        "phase": state.phase,
        "working_directory": state.working_directory,
        "current_template": state.current_template_name,
        "frame": state.frame.to_payload(),
        "layers": _store.layer_summary(),
        "selected_ids": state.selected_ids,
        "zoom_percent": zoom_percent(state.zoom),
    }, indent=2)


# ── Server Setup ────────────────────────────────────────────────────────

@asynccontextmanager
async def server_lifespan(server: FastMCP) -> AsyncIterator[Dict[str, Any]]:
    try:
        logger.info("InfographicEditor MCP server starting up")
        if _settings.working_directory:
            try:
                await open_working_directory(_store, _host, str(_settings.working_directory))
                await _persistence.fetch_templates()
            except InfokitError as e:
                logger.warning(f"Could not open working directory on startup: {str(e)}")
        await _generation.load_cpu_info()
        yield {}
    finally:
        await _persistence.flush()
        _persistence.close()
        logger.info("InfographicEditor MCP server shut down")


mcp = FastMCP("InfographicEditor", lifespan=server_lifespan)


# ═══════════════════════════════════════════════════════════════════════
# WORKING DIRECTORY & IMAGE SELECTION TOOLS
# ═══════════════════════════════════════════════════════════════════════

@mcp.tool()
async def open_directory(ctx: Context, directory: str) -> str:
    """Open a directory of source images. Every image starts selected.

    Parameters:
    - directory: Path to a folder of jpg/png/webp/... images
    """
    try:
        images = await open_working_directory(_store, _host, directory)
        await _persistence.fetch_templates()
    except InfokitError as e:
        return f"Error opening directory: {str(e)}"
    return json.dumps({
        "status": "opened",
        "directory": directory,
        "image_count": len(images),
        "images": [img.name for img in images],
        "template_count": len(_store.templates),
    }, indent=2)


@mcp.tool()
def toggle_image(ctx: Context, path: str) -> str:
    """Select or deselect one source image for the batch.

    Parameters:
    - path: Full path of the image, as listed by open_directory
    """
    _store.toggle_image_selection(path)
    return json.dumps({"selected": _store.selected_image_paths}, indent=2)


@mcp.tool()
def set_all_images_selected(ctx: Context, selected: bool = True) -> str:
    """Select or deselect every source image."""
    if selected:
        _store.select_all_images()
    else:
        _store.deselect_all_images()
    return json.dumps({"selected_count": len(_store.selected_image_paths)}, indent=2)


@mcp.tool()
def proceed_to_editor(ctx: Context) -> str:
    """Open the editor with the first selected image as the hero layer."""
    _store.proceed_to_editor()
    return _document_json()


# ═══════════════════════════════════════════════════════════════════════
# DOCUMENT TOOLS
# ═══════════════════════════════════════════════════════════════════════

@mcp.tool()
def get_document(ctx: Context) -> str:
    """Get the frame, the layer list (top-most first), the selection and the zoom."""
    return _document_json()


@mcp.tool()
def get_object(ctx: Context, object_id: str) -> str:
    """Get every property of one layer.

    Parameters:
    - object_id: The layer id
    """
    obj = _store.get_object(object_id)
    if not obj:
        return f"Error: Object '{object_id}' not found."
    return json.dumps(obj.to_payload(), indent=2)


@mcp.tool()
def set_frame(ctx: Context, width: int = None, height: int = None,
              background_color: str = None, aspect_ratio: str = None) -> str:
    """Edit the output frame.

    Parameters:
    - width / height: Frame size in pixels (does not change the aspect ratio tag)
    - background_color: Hex colour, e.g. #ffffff
    - aspect_ratio: 1:1, 4:3, 16:9 (applies the preset size) or custom
    """
    if aspect_ratio is not None:
        if aspect_ratio not in ASPECT_RATIOS:
            return f"Error: Unknown aspect ratio '{aspect_ratio}'. Use one of: {', '.join(ASPECT_RATIOS)}."
        _store.set_aspect_ratio(aspect_ratio)
    updates = {}
    if width is not None:
        updates["width"] = width
    if height is not None:
        updates["height"] = height
    if background_color is not None:
        updates["background_color"] = background_color
    if updates:
        _store.set_frame(updates)
    return json.dumps(_store.frame.to_payload(), indent=2)


@mcp.tool()
def add_text(ctx: Context, content: str = "New Text", key: str = "",
             properties: Optional[dict] = None) -> str:
    """Add a text layer. Its key names the table column used for per-image text.

    Parameters:
    - content: Default text (used for images without a table override)
    - key: Column key; defaults to TEXT-<n>
    - properties: Optional extra fields (fontSize, fill, align, x, y, ...)
    """
    text = dict(properties or {})
    text["content"] = content
    if key:
        text["key"] = key
    object_id = _store.add_text(text)
    return json.dumps(_store.get_object(object_id).to_payload(), indent=2)


@mcp.tool()
def add_image(ctx: Context, path: str, name: str = "") -> str:
    """Add an auxiliary image layer (icon, logo).

    Parameters:
    - path: Image file path
    - name: Optional layer name
    """
    object_id = _store.add_image(path, name or None, original_path=path)
    return json.dumps(_store.get_object(object_id).to_payload(), indent=2)


@mcp.tool()
def set_background(ctx: Context, path: str, scale_mode: str = "fill") -> str:
    """Set the background image, replacing any existing one.

    Parameters:
    - path: Image file path
    - scale_mode: fill, fit or stretch
    """
    if scale_mode not in SCALE_MODES:
        return f"Error: Unknown scale mode '{scale_mode}'. Use one of: {', '.join(SCALE_MODES)}."
    object_id = _store.set_background(path, original_path=path)
    if scale_mode != "fill":
        _store.update_object(object_id, {"scale_mode": scale_mode})
    return json.dumps(_store.get_object(object_id).to_payload(), indent=2)


@mcp.tool()
def replace_hero_image(ctx: Context, path: str) -> str:
    """Point the hero layer at a different source image."""
    _store.replace_hero_image(path, path)
    hero = _store.hero()
    if not hero:
        return "Error: The document has no hero layer. Use proceed_to_editor first."
    return json.dumps(hero.to_payload(), indent=2)


@mcp.tool()
def update_object(ctx: Context, object_id: str, updates: dict) -> str:
    """Change properties of a layer.

    Parameters:
    - object_id: The layer id
    - updates: Fields to change, e.g. {"x": 10, "opacity": 0.5, "fontSize": 48}
    """
    obj = _store.get_object(object_id)
    if not obj:
        return f"Error: Object '{object_id}' not found."
    try:
        merge_object(obj, updates)
    except ValidationError as e:
        return f"Error: Invalid update for '{object_id}': {str(e)}"
    _store.update_object(object_id, updates)
    return json.dumps(_store.get_object(object_id).to_payload(), indent=2)


@mcp.tool()
def delete_object(ctx: Context, object_id: str) -> str:
    """Delete a layer. The hero layer cannot be deleted."""
    if _store.delete_object(object_id):
        return json.dumps({"status": "deleted", "object_id": object_id}, indent=2)
    return f"Error: Could not delete '{object_id}' (not found, or it is the hero layer)."


@mcp.tool()
def duplicate_object(ctx: Context, object_id: str) -> str:
    """Duplicate a layer, offset by 20px."""
    new_id = _store.duplicate_object(object_id)
    if not new_id:
        return f"Error: Object '{object_id}' not found."
    return json.dumps(_store.get_object(new_id).to_payload(), indent=2)


@mcp.tool()
def select_objects(ctx: Context, object_ids: list[str]) -> str:
    """Select layers (an empty list clears the selection). Use "__FRAME__" for the frame."""
    _store.select_multiple(object_ids)
    return json.dumps({"selected_ids": _store.selected_ids}, indent=2)


@mcp.tool()
def move_object(ctx: Context, object_id: str, to: str) -> str:
    """Change a layer's stacking order.

    Parameters:
    - object_id: The layer id
    - to: "front", "back", or a target index (0 = bottom)
    """
    if to == "front":
        _store.move_to_front(object_id)
    elif to == "back":
        _store.move_to_back(object_id)
    else:
        try:
            target = int(to)
        except ValueError:
            return f"Error: Unknown target '{to}'. Use front, back or an index."
        index = next((i for i, o in enumerate(_store.objects) if o.id == object_id), -1)
        if index == -1:
            return f"Error: Object '{object_id}' not found."
        _store.reorder_objects(index, target)
    return json.dumps(_store.layer_summary(), indent=2)


@mcp.tool()
def align_selection(ctx: Context, horizontal: str = None, vertical: str = None) -> str:
    """Align selected, unlocked layers to the frame.

    Parameters:
    - horizontal: left, center or right
    - vertical: top, middle or bottom
    """
    try:
        if horizontal:
            _store.align_horizontal(horizontal)
        if vertical:
            _store.align_vertical(vertical)
    except ValueError as e:
        return f"Error: {str(e)}"
    return json.dumps([o.to_payload() for o in _store.selected_objects()], indent=2)


@mcp.tool()
def drag_object(ctx: Context, object_id: str, center_x: float, center_y: float) -> str:
    """Move a layer so its centre lands on (center_x, center_y). Locked layers do not move."""
    _store.apply_drag(object_id, center_x, center_y)
    obj = _store.get_object(object_id)
    if not obj:
        return f"Error: Object '{object_id}' not found."
    return json.dumps(obj.to_payload(), indent=2)


@mcp.tool()
def transform_object(ctx: Context, object_id: str, scale_x: float = 1.0, scale_y: float = 1.0,
                     rotation: float = None) -> str:
    """Scale and/or rotate a layer around its centre. Sizes never drop below 5px."""
    obj = _store.get_object(object_id)
    if not obj:
        return f"Error: Object '{object_id}' not found."
    center_x = obj.x + obj.width / 2
    center_y = obj.y + obj.height / 2
    _store.apply_transform(object_id, scale_x, scale_y, center_x, center_y,
                           obj.rotation if rotation is None else rotation)
    return json.dumps(_store.get_object(object_id).to_payload(), indent=2)


@mcp.tool()
def preview_scale_mode(ctx: Context, object_id: str) -> str:
    """Show how an image layer's source is cropped or fitted in its box."""
    obj = _store.get_object(object_id)
    if not obj or obj.type == "text":
        return f"Error: '{object_id}' is not an image layer."
    source = obj.original_path or obj.src
    try:
        natural_width, natural_height = read_image_size(source)
        placement = place_image(getattr(obj, "scale_mode", "fit"),
                                natural_width, natural_height, obj.width, obj.height)
    except (InfokitError, ValueError) as e:
        return f"Error: {str(e)}"
    return json.dumps({
        "natural_size": [natural_width, natural_height],
        "crop": asdict(placement.crop) if placement.crop else None,
        "render": asdict(placement.render),
    }, indent=2)


@mcp.tool()
def press_key(ctx: Context, key: str, ctrl: bool = False) -> str:
    """Send a canvas keyboard shortcut (+, -, Ctrl+0, Delete)."""
    handled = handle_key(_store, KeyPress(key=key, ctrl=ctrl))
    return json.dumps({"handled": handled, "zoom_percent": zoom_percent(_store.zoom)}, indent=2)


@mcp.tool()
def fit_to_view(ctx: Context, container_width: float, container_height: float) -> str:
    """Zoom so the frame fits a viewport of the given size (never above 100%)."""
    _store.fit_to_view(container_width, container_height)
    return json.dumps({"zoom": _store.zoom, "zoom_percent": zoom_percent(_store.zoom)}, indent=2)


@mcp.tool()
def reset_editor(ctx: Context) -> str:
    """Start over with an empty 1080x1080 frame."""
    _store.reset_editor()
    return _document_json()


@mcp.tool()
async def list_fonts(ctx: Context) -> str:
    """List font families available for text layers."""
    return json.dumps(await fetch_system_fonts(_host), indent=2)


# ═══════════════════════════════════════════════════════════════════════
# BATCH TABLE TOOLS
# ═══════════════════════════════════════════════════════════════════════

@mcp.tool()
def get_table(ctx: Context) -> str:
    """Show per-image text values: one row per selected image, one column per visible text layer."""
    _store.initialize_table_data()
    return json.dumps({
        "columns": [t.key for t in _store.text_layers()],
        "rows": _store.table_rows(),
    }, indent=2)


@mcp.tool()
def set_table_cell(ctx: Context, image_path: str, key: str, value: str) -> str:
    """Set the text used for one text layer on one image."""
    _store.set_table_text_value(image_path, key, value)
    return json.dumps({"image": image_path, "key": key, "value": value}, indent=2)


@mcp.tool()
def fill_table_column(ctx: Context, key: str, values: str) -> str:
    """Fill a column from pasted text, one value per line, in image order.

    Parameters:
    - key: Text layer key (column)
    - values: Newline-separated values; extra images keep their current value
    """
    _store.set_table_text_column(key, values)
    return get_table(ctx)


# ═══════════════════════════════════════════════════════════════════════
# TEMPLATE TOOLS
# ═══════════════════════════════════════════════════════════════════════

@mcp.tool()
async def list_templates(ctx: Context) -> str:
    """List templates saved in the working directory."""
    await _persistence.fetch_templates()
    return json.dumps([t.model_dump() for t in _store.templates], indent=2)


@mcp.tool()
async def save_template(ctx: Context, name: str) -> str:
    """Save the document as a template and keep auto-saving edits into it."""
    try:
        await _persistence.save_template(name)
    except InfokitError as e:
        return f"Error saving template: {str(e)}"
    _store.set_current_template(name)
    return json.dumps({"status": "saved", "name": name,
                       "templates": [t.name for t in _store.templates]}, indent=2)


@mcp.tool()
async def load_template(ctx: Context, template_path: str) -> str:
    """Load a template, replacing the document. Later edits auto-save into it."""
    try:
        await _persistence.load_template(template_path)
    except InfokitError as e:
        return f"Error loading template: {str(e)}"
    return _document_json()


@mcp.tool()
async def delete_template(ctx: Context, template_path: str) -> str:
    """Delete a saved template file."""
    try:
        await _persistence.delete_template(template_path)
    except InfokitError as e:
        return f"Error deleting template: {str(e)}"
    return json.dumps({"status": "deleted", "path": template_path}, indent=2)


@mcp.tool()
def detach_template(ctx: Context) -> str:
    """Stop auto-saving into the current template."""
    _persistence.detach()
    return "Detached from template; edits are no longer auto-saved."


# ═══════════════════════════════════════════════════════════════════════
# GENERATION TOOLS
# ═══════════════════════════════════════════════════════════════════════

@mcp.tool()
async def generate_infographics(ctx: Context, parallelism: int = 0) -> str:
    """Render one infographic per selected image through the renderer process.

    Parameters:
    - parallelism: Worker count (0 = recommended for this machine)
    """
    _store.initialize_table_data()
    result = await _generation.generate(parallelism or None)
    return json.dumps(result.model_dump(), indent=2)


# ═══════════════════════════════════════════════════════════════════════
# MCP PROMPT
# ═══════════════════════════════════════════════════════════════════════

@mcp.prompt()
def infographic_workflow() -> str:
    """Recommended workflow for batch infographics"""
    return """You are helping the user build a batch of infographics. Follow this workflow:

1. **Open Images**: Use open_directory() with the folder of product photos.
   Use toggle_image() to leave out images that should not get an infographic.

2. **Start Editing**: Use proceed_to_editor(). The first selected image becomes
   the hero layer; every generated infographic swaps in its own image here.

3. **Lay Out**: Use set_frame() for size, add_text() for captions,
   add_image() for icons and set_background() for a backdrop.
   Use update_object(), align_selection() and move_object() to arrange layers.

4. **Per-Image Text**: Use get_table() to see one row per image.
   Use fill_table_column() to paste a column of values, or set_table_cell().

5. **Save**: Use save_template() so the layout can be reused; edits then auto-save.

6. **Generate**: Use generate_infographics() to render every selected image.

Tips:
- The hero layer cannot be deleted, only replaced with replace_hero_image()
- Hidden text layers are left out of the table
- Locked layers ignore drag and alignment
"""


# ── Main ────────────────────────────────────────────────────────────────

def main():
    """Run the MCP server"""
    mcp.run()


if __name__ == "__main__":
    main()
