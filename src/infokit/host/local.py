"""Filesystem host — images, fonts and templates on the local machine."""

import asyncio
import json
import logging
import os
import sys
from pathlib import Path
from typing import Optional

import psutil
from PIL import Image, ImageFont, UnidentifiedImageError

from ..config import DEFAULT_RENDERER_HOST, DEFAULT_RENDERER_PORT, TEMPLATES_DIR
from ..core.fonts import DEFAULT_FONTS
from ..core.templates import TemplateInfo
from ..errors import HostError
from .bridge import (
    CpuInfo,
    GenerationRequest,
    GenerationResult,
    ImageFileInfo,
    ProgressCallback,
)
from .renderer import RendererConnection

logger = logging.getLogger("InfographicEditor.host.local")

IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp", ".bmp", ".svg"}
FONT_EXTENSIONS = {".ttf", ".otf", ".ttc"}


def font_directories() -> list[Path]:
    home = Path.home()
    if sys.platform == "darwin":
        return [Path("/System/Library/Fonts"), Path("/Library/Fonts"), home / "Library" / "Fonts"]
    if sys.platform.startswith("win"):
        return [Path(os.environ.get("WINDIR", "C:\\Windows")) / "Fonts"]
    return [
        Path("/usr/share/fonts"),
        Path("/usr/local/share/fonts"),
        home / ".local" / "share" / "fonts",
        home / ".fonts",
    ]


def sanitize_template_name(name: str) -> str:
    """Keep alphanumerics, ``-``, ``_`` and spaces."""
    return "".join(c for c in name if c.isalnum() or c in "-_ ")


def read_image_size(path: str | Path) -> tuple[int, int]:
    """Natural pixel size of an image file."""
    try:
        with Image.open(path) as img:
            return img.size
    except (OSError, UnidentifiedImageError) as e:
        raise HostError(f"Cannot read image size of {path}: {e}") from e


def scan_font_families(directories: list[Path]) -> list[str]:
    families = set()
    for directory in directories:
        if not directory.is_dir():
            continue
        for font_path in directory.rglob("*"):
            if font_path.suffix.lower() not in FONT_EXTENSIONS:
                continue
            try:
                family, _style = ImageFont.truetype(str(font_path), size=12).getname()
            except OSError:
                continue
            if family and not family.startswith("."):
                families.add(family)
    return sorted(families)


class LocalHost:
    """``HostBridge`` backed by the local filesystem and a renderer socket."""

    def __init__(self, renderer: Optional[RendererConnection] = None,
                 font_dirs: Optional[list[Path]] = None):
        self.renderer = renderer or RendererConnection(
            host=DEFAULT_RENDERER_HOST, port=DEFAULT_RENDERER_PORT
        )
        self.font_dirs = font_dirs

    # ── Images ──────────────────────────────────────────────────────────

    async def enumerate_images(self, directory: str) -> list[ImageFileInfo]:
        """Image files directly inside ``directory``, sorted by name (case-insensitive)."""
        path = Path(directory)
        if not path.is_dir():
            raise HostError(f"Not a valid directory: {directory}")
        images = [
            ImageFileInfo(path=str(entry), name=entry.name)
            for entry in path.iterdir()
            if entry.is_file() and entry.suffix.lower() in IMAGE_EXTENSIONS
        ]
        images.sort(key=lambda img: img.name.lower())
        return images

    async def resolve_display_url(self, path: str) -> str:
        return Path(path).resolve().as_uri()

    # ── Fonts ───────────────────────────────────────────────────────────

    async def list_system_fonts(self) -> list[str]:
        directories = self.font_dirs if self.font_dirs is not None else font_directories()
        try:
            fonts = await asyncio.to_thread(scan_font_families, directories)
        except OSError as e:
            logger.warning(f"Font scan failed: {e}")
            fonts = []
        return fonts or list(DEFAULT_FONTS)

    # ── Templates ───────────────────────────────────────────────────────

    async def list_templates(self, working_directory: str) -> list[TemplateInfo]:
        """Templates in the working directory, newest first. Unreadable files are skipped."""
        templates_path = Path(working_directory) / TEMPLATES_DIR
        if not templates_path.exists():
            return []

        templates = []
        for file_path in templates_path.glob("*.json"):
            try:
                data = json.loads(file_path.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError) as e:
                logger.warning(f"Skipping unreadable template {file_path}: {e}")
                continue
            templates.append(TemplateInfo(
                name=data.get("name") or file_path.stem,
                path=str(file_path),
                created_at=data.get("createdAt", ""),
            ))
        templates.sort(key=lambda t: t.created_at, reverse=True)
        return templates

    async def save_template_blob(self, working_directory: str, name: str, payload: str) -> str:
        safe_name = sanitize_template_name(name)
        if not safe_name:
            raise HostError(f"Invalid template name: {name!r}")
        templates_path = Path(working_directory) / TEMPLATES_DIR
        try:
            templates_path.mkdir(parents=True, exist_ok=True)
            file_path = templates_path / f"{safe_name}.json"
            file_path.write_text(payload, encoding="utf-8")
        except OSError as e:
            raise HostError(str(e)) from e
        return str(file_path)

    async def load_template_blob(self, path: str) -> str:
        file_path = Path(path)
        if not file_path.exists():
            raise HostError(f"Template file not found: {path}")
        try:
            return file_path.read_text(encoding="utf-8")
        except OSError as e:
            raise HostError(str(e)) from e

    async def delete_template_blob(self, path: str) -> None:
        file_path = Path(path)
        if not file_path.exists():
            raise HostError(f"Template file not found: {path}")
        try:
            file_path.unlink()
        except OSError as e:
            raise HostError(str(e)) from e

    # ── Generation ──────────────────────────────────────────────────────

    async def report_cpu_info(self) -> CpuInfo:
        logical = psutil.cpu_count(logical=True) or 1
        physical = psutil.cpu_count(logical=False) or logical
        return CpuInfo(
            logical_cores=logical,
            physical_cores=physical,
            recommended=max(1, logical // 2),
        )

    async def generate_artifacts(self, request: GenerationRequest,
                                 on_progress: Optional[ProgressCallback] = None) -> GenerationResult:
        return await self.renderer.generate_async(request, on_progress)
