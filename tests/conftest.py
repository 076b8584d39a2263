"""
Shared fixtures for the QR fixer test suite.
"""

from io import BytesIO
from typing import Callable

import pytest
from PIL import Image, ImageDraw

from models.fixer_config import FixerConfig
from models.session import FixerSession
from web.app import create_app


def _checker(width: int, height: int, cell: int = 10) -> Image.Image:
    """Black/white checkerboard with an opaque alpha channel, QR-ish."""
    img = Image.new("RGBA", (width, height), (255, 255, 255, 255))
    draw = ImageDraw.Draw(img)
    for y in range(0, height, cell):
        for x in range(0, width, cell):
            if (x // cell + y // cell) % 2 == 0:
                draw.rectangle([x, y, x + cell - 1, y + cell - 1], fill=(0, 0, 0, 255))
    return img


@pytest.fixture
def make_image() -> Callable[..., Image.Image]:
    return _checker


@pytest.fixture
def sample_image() -> Image.Image:
    """A 100x100 test image."""
    return _checker(100, 100)


@pytest.fixture
def png_bytes() -> Callable[..., bytes]:
    def encode(img: Image.Image, fmt: str = "PNG") -> bytes:
        buf = BytesIO()
        if fmt == "JPEG":
            img = img.convert("RGB")
        img.save(buf, format=fmt)
        return buf.getvalue()
    return encode


@pytest.fixture
def config() -> FixerConfig:
    return FixerConfig()


@pytest.fixture
def session(config: FixerConfig) -> FixerSession:
    return FixerSession(config)


@pytest.fixture
def app(config: FixerConfig):
    app = create_app(config)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def upload(client, png_bytes):
    """Post an image to the web app and return the response."""
    def post(img: Image.Image, filename: str = "qr.png"):
        return client.post(
            "/api/upload",
            data={"file": (BytesIO(png_bytes(img)), filename)},
            content_type="multipart/form-data",
        )
    return post
