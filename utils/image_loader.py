"""Decode uploaded files into RGBA Pillow images."""

import logging
import os
from io import BytesIO
from typing import BinaryIO, Union

from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

ImageSource = Union[str, os.PathLike, bytes, BinaryIO]

DEFAULT_MAX_PIXELS = 25_000_000

IMAGE_FILETYPES = [
    ("Image files", "*.png *.jpg *.jpeg *.gif *.webp *.bmp *.tiff"),
    ("All files", "*.*"),
]


class ImageLoadError(ValueError):
    """The selected file could not be decoded as an image."""


def _open(source: ImageSource) -> Image.Image:
    if isinstance(source, (bytes, bytearray)):
        if not source:
            raise ImageLoadError("File is empty")
        return Image.open(BytesIO(source))
    return Image.open(source)


def load_image(source: ImageSource, max_pixels: int = DEFAULT_MAX_PIXELS) -> Image.Image:
    """Decode *source* into a fully loaded RGBA image.

    Args:
        source: File path, raw bytes, or a readable binary stream.
        max_pixels: Largest accepted width * height.

    Returns:
        The decoded image converted to RGBA.

    Raises:
        ImageLoadError: The content is empty, not an image, truncated,
            or larger than ``max_pixels``.
    """
    try:
        img = _open(source)
    except (UnidentifiedImageError, OSError, SyntaxError, Image.DecompressionBombError) as e:
        raise ImageLoadError(f"Not a readable image: {e}") from e

    with img:
        pixels = img.width * img.height
        if pixels > max_pixels:
            raise ImageLoadError(f"Image too large ({pixels:,} pixels, max {max_pixels:,})")

        try:
            # Force the decode now so corrupt data fails here
            img.load()
            converted = img.convert("RGBA")
        except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as e:
            raise ImageLoadError(f"Invalid image: {e}") from e

        logger.debug("Decoded %s image %dx%d", img.format, img.width, img.height)
    return converted
