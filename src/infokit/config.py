"""Runtime configuration for the infographic editor.

Values come from environment variables with module-level defaults, the
same way the MCP server resolves its renderer connection.
"""

import os
from pathlib import Path
from typing import Optional
from pydantic import BaseModel

DEFAULT_RENDERER_HOST = "localhost"
DEFAULT_RENDERER_PORT = 9877
DEFAULT_AUTOSAVE_DELAY = 1.5  # seconds of quiet before an auto-save fires

TEMPLATES_DIR = ".infographics-templates"
OUTPUT_DIR = "infographics"


class EditorSettings(BaseModel):
    """Resolved editor settings."""
    renderer_host: str = DEFAULT_RENDERER_HOST
    renderer_port: int = DEFAULT_RENDERER_PORT
    autosave_delay: float = DEFAULT_AUTOSAVE_DELAY
    working_directory: Optional[Path] = None

    @classmethod
    def from_env(cls) -> "EditorSettings":
        working_dir = os.getenv("INFOGRAPHIC_WORKING_DIR")
        return cls(
            renderer_host=os.getenv("INFOGRAPHIC_RENDERER_HOST", DEFAULT_RENDERER_HOST),
            renderer_port=int(os.getenv("INFOGRAPHIC_RENDERER_PORT", DEFAULT_RENDERER_PORT)),
            autosave_delay=float(os.getenv("INFOGRAPHIC_AUTOSAVE_DELAY", DEFAULT_AUTOSAVE_DELAY)),
            working_directory=Path(working_dir) if working_dir else None,
        )
