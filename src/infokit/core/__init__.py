"""Core editor package — public API re-exports."""

from .frame import Frame, ASPECT_RATIO_PRESETS
from .objects import (
    BaseObject,
    HeroObject,
    BackgroundObject,
    TextObject,
    ImageObject,
    CanvasObject,
)
from .layers import LayerStack
from .templates import TemplateInfo, TemplatePayload

__all__ = [
    "Frame",
    "ASPECT_RATIO_PRESETS",
    "BaseObject",
    "HeroObject",
    "BackgroundObject",
    "TextObject",
    "ImageObject",
    "CanvasObject",
    "LayerStack",
    "TemplateInfo",
    "TemplatePayload",
]
