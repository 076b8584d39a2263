"""Fixer settings: slider bounds, export name and decode limits, with JSON loading."""

from dataclasses import dataclass, asdict
import json
import os

RESAMPLE_FILTERS = ("nearest", "bilinear", "bicubic", "lanczos")


@dataclass
class FixerConfig:
    """Settings shared by the desktop window and the web page."""
    min_scale: float = 0.5
    max_scale: float = 3.0
    scale_step: float = 0.05
    default_scale: float = 1.5
    reset_scale: float = 1.0
    export_filename: str = "fixed-qr-code.png"
    resample: str = "bilinear"  # one of RESAMPLE_FILTERS
    max_image_pixels: int = 25_000_000
    max_upload_mb: int = 50

    def __post_init__(self):
        if self.min_scale <= 0 or self.min_scale > self.max_scale:
            raise ValueError(
                f"Invalid scale range: {self.min_scale} - {self.max_scale}")
        if self.scale_step <= 0:
            raise ValueError(f"scale_step must be positive, got {self.scale_step}")
        for name in ("default_scale", "reset_scale"):
            value = getattr(self, name)
            if not self.min_scale <= value <= self.max_scale:
                raise ValueError(
                    f"{name} {value} is outside {self.min_scale} - {self.max_scale}")
        if self.resample not in RESAMPLE_FILTERS:
            raise ValueError(f"Unknown resample filter: {self.resample!r}")
        if self.max_image_pixels <= 0:
            raise ValueError("max_image_pixels must be positive")

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: dict) -> "FixerConfig":
        return cls(**{k: v for k, v in d.items() if k in cls.__dataclass_fields__})

    @classmethod
    def load_json(cls, path: str) -> "FixerConfig":
        with open(path, "r", encoding="utf-8") as f:
            return cls.from_dict(json.load(f))


def load_config(environ=None) -> FixerConfig:
    """Return the config named by ``QR_FIXER_CONFIG``, or the defaults."""
    environ = os.environ if environ is None else environ
    path = environ.get("QR_FIXER_CONFIG", "")
    if path:
        return FixerConfig.load_json(path)
    return FixerConfig()
