"""Shared fixtures: an in-memory host and stores pre-populated with images."""

import pytest

from infokit.core.state import EditorStore
from infokit.core.templates import TemplateInfo
from infokit.errors import HostError
from infokit.host.bridge import (
    CpuInfo,
    GenerationProgress,
    GenerationResult,
    ImageFile,
    ImageFileInfo,
)

WORKING_DIR = "/work/shoot"


class FakeHost:
    """In-memory ``HostBridge`` that records every call."""

    def __init__(self):
        self.images: list[ImageFileInfo] = []
        self.fonts: list[str] = ["Arial", "Roboto"]
        self.fonts_error = False
        self.blobs: dict[str, str] = {}
        self.created: dict[str, str] = {}
        self.saved: list[tuple[str, str, str]] = []
        self.fail_save = False
        self.fail_list = False
        self.cpu_error = False
        self.generate_error = False
        self.requests = []
        self.emitted: list[GenerationProgress] = []

    async def enumerate_images(self, directory):
        return list(self.images)

    async def resolve_display_url(self, path):
        return f"file://{path}"

    async def list_system_fonts(self):
        if self.fonts_error:
            raise HostError("font backend unavailable")
        return list(self.fonts)

    async def list_templates(self, working_directory):
        if self.fail_list:
            raise HostError("cannot read templates")
        return [
            TemplateInfo(name=path.rsplit("/", 1)[-1][:-5], path=path,
                         created_at=self.created.get(path, ""))
            for path in sorted(self.blobs)
        ]

    async def save_template_blob(self, working_directory, name, payload):
        if self.fail_save:
            raise HostError("disk full")
        path = f"{working_directory}/.infographics-templates/{name}.json"
        self.blobs[path] = payload
        self.saved.append((working_directory, name, payload))
        return path

    async def load_template_blob(self, path):
        if path not in self.blobs:
            raise HostError(f"Template file not found: {path}")
        return self.blobs[path]

    async def delete_template_blob(self, path):
        if path not in self.blobs:
            raise HostError(f"Template file not found: {path}")
        del self.blobs[path]

    async def report_cpu_info(self):
        if self.cpu_error:
            raise HostError("no cpu info")
        return CpuInfo(logical_cores=8, physical_cores=4, recommended=4)

    async def generate_artifacts(self, request, on_progress=None):
        self.requests.append(request)
        if self.generate_error:
            raise HostError("renderer offline")
        total = len(request.selected_images)
        files = []
        for i, image in enumerate(request.selected_images, start=1):
            progress = GenerationProgress(current=i, total=total, current_file=image.name)
            self.emitted.append(progress)
            if on_progress:
                on_progress(progress)
            files.append(f"{request.working_directory}/infographics/{image.name}.png")
        return GenerationResult(success=True, generated_files=files)


def make_images(*names: str) -> list[ImageFile]:
    return [
        ImageFile(path=f"{WORKING_DIR}/{n}", name=n, thumbnail_url=f"file://{WORKING_DIR}/{n}")
        for n in names
    ]


@pytest.fixture
def fake_host():
    return FakeHost()


@pytest.fixture
def store():
    return EditorStore()


@pytest.fixture
def gallery_store():
    """A store with a working directory and three selected images."""
    s = EditorStore()
    s.set_working_directory(WORKING_DIR, "shoot")
    s.set_all_images(make_images("p1.jpg", "p2.jpg", "p3.jpg"))
    return s


@pytest.fixture
def editor_store(gallery_store):
    """``gallery_store`` after entering the editor (hero from p1.jpg)."""
    gallery_store.proceed_to_editor()
    return gallery_store
