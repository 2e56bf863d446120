"""Batch table data — per-image overrides for text layers.

``TableData`` maps an image path (row) to a mapping of text-layer ``key``
(column) to the string substituted for that layer when the image is
rendered. Rows are created lazily and never pruned: a deselected image
keeps its values so they come back when it is selected again.
"""

from typing import Iterable, Sequence, Union

from .objects import CanvasObject, TextObject

TableData = dict[str, dict[str, str]]


def table_columns(objects: Iterable[CanvasObject]) -> list[TextObject]:
    """Visible text layers in layer order; each one is a table column."""
    return [o for o in objects if isinstance(o, TextObject) and o.visible]


def initialize_rows(table: TableData, image_paths: Iterable[str],
                    columns: Sequence[TextObject]) -> bool:
    """Ensure a row per image and a cell per column, defaulting to layer content.

    Existing cells are never overwritten. Returns True if anything was added.
    """
    changed = False
    for path in image_paths:
        row = table.get(path)
        if row is None:
            row = table[path] = {}
            changed = True
        for text in columns:
            if text.key not in row:
                row[text.key] = text.content
                changed = True
    return changed


def set_cell(table: TableData, image_path: str, key: str, value: str) -> bool:
    row = table.setdefault(image_path, {})
    if key in row and row[key] == value:
        return False
    row[key] = value
    return True


def parse_column_block(block: str) -> list[str]:
    """Split pasted spreadsheet text into one trimmed value per line."""
    return [line.strip() for line in block.split("\n")]


def fill_column(table: TableData, key: str, image_paths: Sequence[str],
                values: Union[str, Sequence[str]]) -> int:
    """Assign ``values[i]`` to the ``i``-th image for every ``i`` that has a value.

    ``values`` may be a newline-delimited block. Images past the end of the
    values are left untouched. Returns the number of cells written.
    """
    if isinstance(values, str):
        values = parse_column_block(values)
    written = 0
    for path, value in zip(image_paths, values):
        table.setdefault(path, {})[key] = value
        written += 1
    return written


def resolve_cell(table: TableData, image_path: str, text: TextObject) -> str:
    """The text rendered for ``text`` on ``image_path``: the override or the layer content."""
    row = table.get(image_path, {})
    return row.get(text.key, text.content)


def to_rows(table: TableData, image_paths: Sequence[str],
            columns: Sequence[TextObject]) -> list[dict]:
    """Rows for display, one per image, with a value per column key."""
    return [
        {
            "image": path,
            "values": {c.key: resolve_cell(table, path, c) for c in columns},
        }
        for path in image_paths
    ]
