"""Scale factor helpers: clamping, slider snapping, readout and size math."""

import math
from typing import Tuple


def compute_scale_factor(
    image_width: int,
    image_height: int,
    canvas_width: int,
    canvas_height: int,
) -> float:
    """Compute uniform scale factor to fit image within canvas bounds."""
    if image_width <= 0 or image_height <= 0:
        return 1.0
    scale_x = canvas_width / image_width
    scale_y = canvas_height / image_height
    return min(scale_x, scale_y)


def fit_size(
    image_width: int, image_height: int, canvas_width: int, canvas_height: int
) -> Tuple[int, int]:
    """Display size of an image fitted into a canvas, never upscaled."""
    scale = min(1.0, compute_scale_factor(image_width, image_height, canvas_width, canvas_height))
    return (max(1, int(image_width * scale)), max(1, int(image_height * scale)))


def parse_scale(value) -> float:
    """Convert user input to a float scale, rejecting NaN and infinities."""
    try:
        scale = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"Scale must be a number, got {value!r}")
    if not math.isfinite(scale):
        raise ValueError(f"Scale must be finite, got {value!r}")
    return scale


def clamp_scale(scale: float, min_scale: float, max_scale: float) -> float:
    return max(min_scale, min(scale, max_scale))


def snap_scale(scale: float, step: float, min_scale: float) -> float:
    """Snap a continuous slider value onto the step grid starting at min_scale."""
    steps = round((scale - min_scale) / step)
    return round(min_scale + steps * step, 2)


def format_scale(scale: float) -> str:
    """Readout text shown next to the slider, e.g. ``1.50x``."""
    return f"{scale:.2f}x"


def scaled_size(width: int, height: int, scale: float) -> Tuple[int, int]:
    """Surface size for a horizontal-only scale: (round(w * s), h).

    Rounds half up and never returns a zero width. The product is first
    rounded to 6 decimals so float noise such as 57.49999999999999
    (50 * 1.15) still counts as a .5 tie.
    """
    new_width = int(math.floor(round(width * scale, 6) + 0.5))
    return (max(1, new_width), height)
