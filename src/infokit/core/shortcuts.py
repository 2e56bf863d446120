"""Keyboard shortcuts for the canvas."""

from dataclasses import dataclass

from .state import EditorStore


@dataclass(frozen=True)
class KeyPress:
    """A key event as reported by the host UI."""
    key: str
    ctrl: bool = False
    meta: bool = False
    in_text_field: bool = False  # typed into an input/textarea


def handle_key(store: EditorStore, event: KeyPress) -> bool:
    """Apply the shortcut bound to ``event``; returns True if one was handled.

    - ``+`` / ``=``: zoom in
    - ``-``: zoom out
    - ``Ctrl/Cmd+0``: reset zoom to 100%
    - ``Delete`` / ``Backspace``: delete the selected objects (never the hero)
    """
    if event.in_text_field:
        return False

    if event.key in ("+", "="):
        store.zoom_in()
        return True
    if event.key == "-":
        store.zoom_out()
        return True
    if event.key == "0" and (event.ctrl or event.meta):
        store.reset_zoom()
        return True
    if event.key in ("Delete", "Backspace"):
        store.delete_selected()
        return True
    return False
