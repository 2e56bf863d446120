"""Batch generation — hand the document to the renderer and track progress."""

import logging
from typing import Optional

from ..host.bridge import (
    CpuInfo,
    GenerationProgress,
    GenerationRequest,
    GenerationResult,
    ImageFileInfo,
)
from .state import EditorStore

logger = logging.getLogger("InfographicEditor.core.generation")


class GenerationCoordinator:
    """Builds generation requests from the store and runs them on the host.

    Generation failures are reported in the result rather than raised: a
    batch that fails part-way may still have produced files.
    """

    def __init__(self, store: EditorStore, host):
        self._store = store
        self._host = host
        self.cpu_info: Optional[CpuInfo] = None
        self.parallelism: int = 1
        self.progress: Optional[GenerationProgress] = None
        self.last_result: Optional[GenerationResult] = None
        self.running = False

    async def load_cpu_info(self) -> Optional[CpuInfo]:
        try:
            self.cpu_info = await self._host.report_cpu_info()
        except Exception as e:
            logger.warning(f"Could not read CPU info, generating on one worker: {e}")
            self.cpu_info = None
            self.parallelism = 1
            return None
        self.parallelism = self.cpu_info.recommended
        return self.cpu_info

    def build_request(self, parallelism: Optional[int] = None) -> GenerationRequest:
        state = self._store.state
        return GenerationRequest(
            working_directory=state.working_directory or "",
            frame=state.frame,
            objects=state.layers.objects,
            table_data=state.table_data,
            selected_images=[
                ImageFileInfo(path=img.path, name=img.name)
                for img in self._store.selected_images()
            ],
            template_name=state.current_template_name,
            parallelism=parallelism or self.parallelism,
        )

    def _on_progress(self, progress: GenerationProgress):
        self.progress = progress
        logger.debug(f"Generated {progress.current}/{progress.total}: {progress.current_file}")

    async def generate(self, parallelism: Optional[int] = None) -> GenerationResult:
        """Render one artifact per selected image."""
        if not self._store.working_directory:
            return GenerationResult(success=False, errors=["No working directory selected"])
        request = self.build_request(parallelism)
        if not request.selected_images:
            return GenerationResult(success=False, errors=["No images selected"])

        self.running = True
        self.progress = GenerationProgress(current=0, total=len(request.selected_images))
        logger.info(f"Generating {len(request.selected_images)} infographics "
                    f"with parallelism {request.parallelism}")
        try:
            result = await self._host.generate_artifacts(request, self._on_progress)
        except Exception as e:
            logger.error(f"Generation failed: {e}")
            result = GenerationResult(success=False, errors=[str(e)])
        finally:
            self.running = False
            self.progress = None

        if result.errors:
            logger.warning(f"Generation finished with {len(result.errors)} error(s)")
        self.last_result = result
        return result
