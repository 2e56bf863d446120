"""Host collaborator interface and the data it exchanges with the editor.

The editor core never touches the filesystem, fonts or the renderer
directly; it awaits these commands on a host object. ``LocalHost`` is the
filesystem implementation; tests substitute in-memory doubles.
"""

from typing import Callable, Optional, Protocol
from pydantic import Field

from ..core.base import CamelModel
from ..core.frame import Frame
from ..core.objects import CanvasObject
from ..core.templates import TemplateInfo


class ImageFileInfo(CamelModel):
    """An image found in the working directory."""
    path: str
    name: str


class ImageFile(ImageFileInfo):
    """An image plus the URL the editor displays it with."""
    thumbnail_url: str = ""


class CpuInfo(CamelModel):
    logical_cores: int
    physical_cores: int
    recommended: int


class GenerationRequest(CamelModel):
    """Everything a renderer needs to produce one artifact per selected image."""
    working_directory: str
    frame: Frame
    objects: list[CanvasObject] = Field(default_factory=list)
    table_data: dict[str, dict[str, str]] = Field(default_factory=dict)
    selected_images: list[ImageFileInfo] = Field(default_factory=list)
    template_name: Optional[str] = None
    parallelism: Optional[int] = None


class GenerationProgress(CamelModel):
    current: int
    total: int
    current_file: str = ""


class GenerationResult(CamelModel):
    success: bool
    generated_files: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)


ProgressCallback = Callable[[GenerationProgress], None]


class HostBridge(Protocol):
    """Asynchronous commands the editor consumes from its host."""

    async def enumerate_images(self, directory: str) -> list[ImageFileInfo]: ...

    async def resolve_display_url(self, path: str) -> str: ...

    async def list_system_fonts(self) -> list[str]: ...

    async def list_templates(self, working_directory: str) -> list[TemplateInfo]: ...

    async def save_template_blob(self, working_directory: str, name: str, payload: str) -> None: ...

    async def load_template_blob(self, path: str) -> str: ...

    async def delete_template_blob(self, path: str) -> None: ...

    async def report_cpu_info(self) -> CpuInfo: ...

    async def generate_artifacts(self, request: GenerationRequest,
                                 on_progress: Optional[ProgressCallback] = None) -> GenerationResult: ...
