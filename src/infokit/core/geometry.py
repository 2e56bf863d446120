"""Geometry conversions between stored and interactive object coordinates.

Objects are stored with a top-left anchor. The interactive surface rotates
and scales nodes around their centre, so a node is positioned at its centre
with an offset of half its size. These helpers convert between the two and
compute how an image is placed inside a target box for each scale mode.
"""

import math
from dataclasses import dataclass
from typing import Optional

MIN_DIMENSION = 5


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves toward +infinity (2.5 -> 3, -2.5 -> -2)."""
    return math.floor(value + 0.5)


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class InteractiveGeometry:
    """Centre-anchored node position and its registration offset."""
    center_x: float
    center_y: float
    offset_x: float
    offset_y: float


@dataclass(frozen=True)
class ResizeResult:
    x: int
    y: int
    width: int
    height: int
    rotation: int


@dataclass(frozen=True)
class ImagePlacement:
    """Where an image is drawn inside its target box.

    ``crop`` is the source rectangle (``None`` when the whole image is used);
    ``render`` is relative to the target box's top-left corner.
    """
    crop: Optional[Rect]
    render: Rect


def to_interactive_geometry(obj) -> InteractiveGeometry:
    """Convert an object's stored geometry to centre + offset form."""
    offset_x = obj.width / 2
    offset_y = obj.height / 2
    return InteractiveGeometry(
        center_x=obj.x + offset_x,
        center_y=obj.y + offset_y,
        offset_x=offset_x,
        offset_y=offset_y,
    )


def from_drag_result(center_x: float, center_y: float,
                     width: float, height: float) -> tuple[int, int]:
    """Top-left position of a node dragged to ``(center_x, center_y)``."""
    return (
        round_half_up(center_x - width / 2),
        round_half_up(center_y - height / 2),
    )


def from_resize_result(base_width: float, base_height: float,
                       scale_x: float, scale_y: float,
                       center_x: float, center_y: float,
                       rotation: float) -> ResizeResult:
    """Bake an interactive scale/rotate into stored geometry.

    The centre is unchanged by a transform, so the new top-left is derived
    from the centre and the offset of the *new* dimensions.
    """
    width = round_half_up(max(MIN_DIMENSION, base_width * scale_x))
    height = round_half_up(max(MIN_DIMENSION, base_height * scale_y))
    x, y = from_drag_result(center_x, center_y, width, height)
    return ResizeResult(x=x, y=y, width=width, height=height,
                        rotation=round_half_up(rotation))


def constrain_bounding_box(old_box: Rect, new_box: Rect) -> Rect:
    """Reject an interactive box smaller than the minimum dimension."""
    if new_box.width < MIN_DIMENSION or new_box.height < MIN_DIMENSION:
        return old_box
    return new_box


def place_image(scale_mode: str, natural_width: float, natural_height: float,
                target_width: float, target_height: float) -> ImagePlacement:
    """Compute crop and render rectangles for ``scale_mode``.

    - ``fill``: cover the target, cropping the overflowing axis symmetrically
    - ``fit``: contain inside the target, no cropping; positioned at the origin
    - ``stretch``: render exactly at the target size
    """
    if natural_width <= 0 or natural_height <= 0:
        raise ValueError(f"Image size must be positive, got {natural_width}x{natural_height}")
    if target_width <= 0 or target_height <= 0:
        raise ValueError(f"Target size must be positive, got {target_width}x{target_height}")

    target = Rect(0, 0, target_width, target_height)
    if scale_mode == "stretch":
        return ImagePlacement(crop=None, render=target)

    image_ratio = natural_width / natural_height
    target_ratio = target_width / target_height

    if scale_mode == "fill":
        if image_ratio > target_ratio:
            crop_width = natural_height * target_ratio
            crop = Rect((natural_width - crop_width) / 2, 0, crop_width, natural_height)
        else:
            crop_height = natural_width / target_ratio
            crop = Rect(0, (natural_height - crop_height) / 2, natural_width, crop_height)
        return ImagePlacement(crop=crop, render=target)

    if scale_mode == "fit":
        if image_ratio > target_ratio:
            render = Rect(0, 0, target_width, target_width / image_ratio)
        else:
            render = Rect(0, 0, target_height * image_ratio, target_height)
        return ImagePlacement(crop=None, render=render)

    raise ValueError(f"Unknown scale mode: {scale_mode!r}")
