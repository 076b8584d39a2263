"""Draws a raster image onto the drawable surface with a horizontal-only scale."""

import logging
from typing import Optional, Tuple

from PIL import Image

from utils.image_utils import scaled_size

logger = logging.getLogger(__name__)

RESAMPLE = {
    "nearest": Image.NEAREST,
    "bilinear": Image.BILINEAR,
    "bicubic": Image.BICUBIC,
    "lanczos": Image.LANCZOS,
}


class DrawableSurface:
    """Pixel canvas used both as the preview and as the export source."""

    def __init__(self):
        self.image: Optional[Image.Image] = None
        self.render_count = 0

    @property
    def size(self) -> Tuple[int, int]:
        if self.image is None:
            return (0, 0)
        return self.image.size

    @property
    def is_empty(self) -> bool:
        return self.image is None

    def resize(self, width: int, height: int) -> None:
        """Replace the canvas with a cleared, fully transparent one."""
        self.image = Image.new("RGBA", (width, height), (0, 0, 0, 0))

    def clear(self) -> None:
        self.image = None


def draw_scaled_image(
    surface: Optional[DrawableSurface],
    image: Optional[Image.Image],
    scale: float,
    resample: str = "bilinear",
) -> None:
    """Redraw *surface* as *image* stretched to (round(w * scale), h).

    The surface is cleared first, so repeated draws never accumulate.
    Does nothing when either the surface or the image is missing.
    """
    if surface is None or image is None:
        return

    width, height = scaled_size(image.width, image.height, scale)
    surface.resize(width, height)

    stretched = image.resize((width, height), RESAMPLE[resample])
    surface.image.paste(stretched, (0, 0))
    surface.render_count += 1

    logger.debug("Rendered %dx%d -> %dx%d at %.2fx",
                 image.width, image.height, width, height, scale)
