"""Opening a working directory — the image set every batch row comes from."""

import logging
from pathlib import Path

from ..host.bridge import ImageFile
from .state import EditorStore

logger = logging.getLogger("InfographicEditor.core.workspace")


async def open_working_directory(store: EditorStore, host, directory: str) -> list[ImageFile]:
    """Scan ``directory`` for images and make it the working directory.

    Every image found starts selected and the editor moves to the gallery
    phase. Host errors propagate so the caller can report them.
    """
    infos = await host.enumerate_images(directory)
    images = []
    for info in infos:
        url = await host.resolve_display_url(info.path)
        images.append(ImageFile(path=info.path, name=info.name, thumbnail_url=url))

    store.set_working_directory(directory, Path(directory).name or directory)
    store.set_all_images(images)
    store.set_phase("gallery")
    logger.info(f"Opened {directory} with {len(images)} images")
    return images
