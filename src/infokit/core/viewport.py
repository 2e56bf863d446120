"""Viewport arithmetic — zoom clamping, stepping and fit-to-container."""

MIN_ZOOM = 0.1
MAX_ZOOM = 3.0
ZOOM_STEP = 0.1
FIT_PADDING = 80


def clamp_zoom(zoom: float) -> float:
    return max(MIN_ZOOM, min(MAX_ZOOM, zoom))


def step_zoom(zoom: float, delta: float) -> float:
    return clamp_zoom(zoom + delta)


def fit_zoom(container_width: float, container_height: float,
             frame_width: float, frame_height: float) -> float:
    """Largest zoom that fits the frame inside the padded container, capped at 1.

    The frame is only ever zoomed down to fit, never above 100%.
    """
    available_width = container_width - FIT_PADDING
    available_height = container_height - FIT_PADDING
    scale_x = available_width / frame_width
    scale_y = available_height / frame_height
    return min(scale_x, scale_y, 1.0)


def zoom_percent(zoom: float) -> int:
    """Zoom as a display percentage."""
    return int(zoom * 100 + 0.5)
