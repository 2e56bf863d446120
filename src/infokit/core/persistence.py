"""Template persistence — save, load, list and delete templates through the host.

``TemplatePersistence`` also owns the auto-save timer: while a template is
bound as the current template, any change to the frame, the layers or the
table data (re)arms a single ``asyncio`` timer. A change inside the quiet
period cancels the pending timer and starts a new one, so a burst of edits
produces one save, made with the state as it is when the timer fires.
"""

import asyncio
import logging
from typing import Optional

from ..config import DEFAULT_AUTOSAVE_DELAY
from ..errors import TemplateError
from .state import FRAME, OBJECTS, TABLE_DATA, EditorStore
from .templates import TemplatePayload

logger = logging.getLogger("InfographicEditor.core.persistence")

AUTOSAVE_SLICES = frozenset({FRAME, OBJECTS, TABLE_DATA})


class TemplatePersistence:
    """Bridges the store's document to template files held by the host."""

    def __init__(self, store: EditorStore, host, autosave_delay: float = DEFAULT_AUTOSAVE_DELAY):
        self._store = store
        self._host = host
        self.autosave_delay = autosave_delay
        self._timer: Optional[asyncio.TimerHandle] = None
        self._tasks: set[asyncio.Task] = set()
        self._unsubscribe = store.subscribe(self._on_store_change)

    @property
    def autosave_pending(self) -> bool:
        return self._timer is not None

    # ── Host commands ───────────────────────────────────────────────────

    async def fetch_templates(self):
        """Refresh the template list for the working directory.

        Failures are logged and leave an empty list.
        """
        working_dir = self._store.working_directory
        if not working_dir:
            return
        try:
            templates = await self._host.list_templates(working_dir)
        except Exception as e:
            logger.error(f"Failed to fetch templates: {e}")
            templates = []
        self._store.set_templates(templates)

    async def save_template(self, name: str):
        """Write the current document under ``name`` and refresh the list."""
        working_dir = self._store.working_directory
        if not working_dir:
            logger.warning(f"Cannot save template '{name}': no working directory")
            return

        payload = self._store.to_payload(name)
        try:
            await self._host.save_template_blob(working_dir, name, payload.encode())
        except Exception as e:
            logger.error(f"Failed to save template '{name}': {e}")
            raise TemplateError(f"Failed to save template '{name}': {e}") from e
        await self.fetch_templates()

    async def load_template(self, template_path: str):
        """Replace the document with a stored template and bind it for auto-save.

        On failure the in-memory document is left as it was.
        """
        try:
            blob = await self._host.load_template_blob(template_path)
            payload = TemplatePayload.decode(blob)
        except Exception as e:
            logger.error(f"Failed to load template {template_path}: {e}")
            raise TemplateError(f"Failed to load template {template_path}: {e}") from e
        self._store.load_document(payload)
        logger.info(f"Loaded template '{payload.name}' from {template_path}")

    async def delete_template(self, template_path: str):
        try:
            await self._host.delete_template_blob(template_path)
        except Exception as e:
            logger.error(f"Failed to delete template {template_path}: {e}")
            raise TemplateError(f"Failed to delete template {template_path}: {e}") from e
        await self.fetch_templates()

    def detach(self):
        """Unbind the current template; later edits no longer auto-save."""
        self._store.clear_current_template()

    # ── Auto-save ───────────────────────────────────────────────────────

    def _on_store_change(self, store: EditorStore, changed: frozenset):
        if not changed & AUTOSAVE_SLICES:
            return
        if not store.current_template_name or not store.working_directory:
            return
        self._schedule_autosave()

    def _schedule_autosave(self):
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop; auto-save not scheduled")
            return
        if self._timer is not None:
            self._timer.cancel()
        self._timer = loop.call_later(self.autosave_delay, self._fire_autosave)

    def _fire_autosave(self):
        self._timer = None
        name = self._store.current_template_name
        if not name:
            return
        task = asyncio.get_running_loop().create_task(self._autosave(name))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _autosave(self, name: str):
        try:
            await self.save_template(name)
            logger.info(f"Auto-saved template: {name}")
        except TemplateError as e:
            logger.error(f"Auto-save failed: {e}")

    async def flush(self):
        """Wait for auto-saves that have already fired."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def close(self):
        """Cancel a pending auto-save and stop observing the store."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._unsubscribe()
