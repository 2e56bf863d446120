"""Frame model — the fixed-size output canvas every object is placed in."""

from typing import Literal, get_args
from pydantic import Field

from .base import CamelModel

AspectRatio = Literal["1:1", "4:3", "16:9", "custom"]
ASPECT_RATIOS: tuple[str, ...] = get_args(AspectRatio)

ASPECT_RATIO_PRESETS: dict[str, tuple[int, int]] = {
    "1:1": (1080, 1080),
    "4:3": (1080, 810),
    "16:9": (1920, 1080),
}

DEFAULT_WIDTH = 1080
DEFAULT_HEIGHT = 1080
DEFAULT_BACKGROUND_COLOR = "#ffffff"


class Frame(CamelModel):
    """Output canvas settings.

    ``width``/``height`` are not validated: editing them independently of a
    preset leaves ``aspect_ratio`` untouched.
    """
    aspect_ratio: AspectRatio = "1:1"
    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    background_color: str = Field(default=DEFAULT_BACKGROUND_COLOR)

    def matches_preset(self) -> bool:
        """True when the dimensions agree with the named preset (always for custom)."""
        preset = ASPECT_RATIO_PRESETS.get(self.aspect_ratio)
        if preset is None:
            return True
        return (self.width, self.height) == preset

    def apply_preset(self, ratio: AspectRatio) -> "Frame":
        """Return a copy switched to ``ratio``; ``custom`` keeps the current size.

        Raises ``ValueError`` for a ratio that is neither a preset nor ``custom``.
        """
        if ratio not in ASPECT_RATIOS:
            raise ValueError(f"Unknown aspect ratio: {ratio!r}")
        preset = ASPECT_RATIO_PRESETS.get(ratio)
        if preset is None:
            return self.model_copy(update={"aspect_ratio": ratio})
        width, height = preset
        return self.model_copy(update={"aspect_ratio": ratio, "width": width, "height": height})
