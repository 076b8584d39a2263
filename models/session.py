"""Interaction state: the loaded image, the scale factor and the rendered surface."""

import logging
from typing import Optional

from PIL import Image

from models.fixer_config import FixerConfig
from export.renderer import DrawableSurface, draw_scaled_image
from export.png_export import ExportError, export_png_bytes, save_png
from utils.image_loader import ImageLoadError, ImageSource, load_image
from utils.image_utils import clamp_scale, format_scale, parse_scale

logger = logging.getLogger(__name__)


class FixerSession:
    """Owns the (image, scale) pair and keeps the surface in sync with it.

    Uploads are split into ``begin_upload`` and ``complete_upload`` so a
    decode can run elsewhere; each upload gets a token and only the most
    recent token may commit (last upload wins).
    """

    def __init__(self, config: Optional[FixerConfig] = None):
        self.config: FixerConfig = config or FixerConfig()
        self.image: Optional[Image.Image] = None
        self.filename: str = ""
        self.scale: float = self.config.default_scale
        self.surface = DrawableSurface()
        self.error: Optional[str] = None
        self._upload_seq = 0

    @property
    def has_image(self) -> bool:
        return self.image is not None

    @property
    def readout(self) -> str:
        return format_scale(self.scale)

    # ------------------------------------------------------------------
    # Upload
    # ------------------------------------------------------------------

    def begin_upload(self) -> int:
        """Start an upload and return its token."""
        self._upload_seq += 1
        return self._upload_seq

    def is_current(self, token: int) -> bool:
        return token == self._upload_seq

    def complete_upload(self, token: int, image: Image.Image, filename: str = "") -> bool:
        """Install a decoded image if *token* is still the latest upload."""
        if not self.is_current(token):
            logger.info("Discarding superseded upload %d (latest is %d)",
                        token, self._upload_seq)
            return False
        self.image = image
        self.filename = filename
        self.error = None
        logger.info("Loaded %s (%dx%d)", filename or "image", image.width, image.height)
        self.render()
        return True

    def fail_upload(self, token: int, message: str) -> bool:
        """Record a decode failure; the previous image stays in place."""
        if not self.is_current(token):
            return False
        self.error = message
        logger.warning("Upload failed: %s", message)
        return True

    def upload(self, source: ImageSource, filename: str = "") -> Image.Image:
        """Decode *source* and install it in one step."""
        token = self.begin_upload()
        try:
            img = load_image(source, self.config.max_image_pixels)
        except ImageLoadError as e:
            self.fail_upload(token, str(e))
            raise
        self.complete_upload(token, img, filename)
        return img

    # ------------------------------------------------------------------
    # Scale
    # ------------------------------------------------------------------

    def render(self) -> None:
        draw_scaled_image(self.surface, self.image, self.scale, self.config.resample)

    def set_scale(self, value) -> float:
        """Clamp *value* into the slider range, store it and redraw."""
        scale = clamp_scale(parse_scale(value), self.config.min_scale, self.config.max_scale)
        self.scale = scale
        if self.has_image:
            self.render()
        return scale

    def reset(self) -> float:
        self.scale = self.config.reset_scale
        if self.has_image:
            self.render()
        return self.scale

    # ------------------------------------------------------------------
    # Export & errors
    # ------------------------------------------------------------------

    def export_png(self) -> bytes:
        try:
            return export_png_bytes(self.surface)
        except ExportError as e:
            self.error = str(e)
            raise

    def save_png(self, path: str) -> None:
        try:
            save_png(self.surface, path)
        except ExportError as e:
            self.error = str(e)
            raise

    def dismiss_error(self) -> None:
        self.error = None

    def snapshot(self) -> dict:
        """JSON-friendly view of the session."""
        width, height = self.image.size if self.image else (0, 0)
        surface_w, surface_h = self.surface.size
        return {
            "has_image": self.has_image,
            "filename": self.filename,
            "width": width,
            "height": height,
            "scale": self.scale,
            "readout": self.readout,
            "surface_width": surface_w,
            "surface_height": surface_h,
            "render_count": self.surface.render_count,
            "error": self.error,
        }
