"""PNG export of the drawable surface."""

import logging
from io import BytesIO

from export.renderer import DrawableSurface

logger = logging.getLogger(__name__)


class ExportError(RuntimeError):
    """Nothing has been rendered yet, or the PNG could not be written."""


def export_png_bytes(surface: DrawableSurface) -> bytes:
    """Serialize the current surface content as PNG without re-rendering it."""
    if surface is None or surface.is_empty:
        raise ExportError("Nothing to export: load an image first")
    buf = BytesIO()
    surface.image.save(buf, format="PNG")
    data = buf.getvalue()
    logger.info("Exported %dx%d PNG (%d bytes)", *surface.size, len(data))
    return data


def save_png(surface: DrawableSurface, path: str) -> None:
    """Write the current surface content to *path* as PNG."""
    data = export_png_bytes(surface)
    try:
        with open(path, "wb") as f:
            f.write(data)
    except OSError as e:
        raise ExportError(f"Could not write {path}: {e}") from e
