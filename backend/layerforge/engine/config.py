"""Resampling filters and render worker sizing."""

from __future__ import annotations

import os
from dataclasses import dataclass

from PIL import Image

# Filters accepted by name in settings / PipelineConfig
RESAMPLE_FILTERS: dict[str, Image.Resampling] = {
    "nearest": Image.Resampling.NEAREST,
    "bilinear": Image.Resampling.BILINEAR,
    "bicubic": Image.Resampling.BICUBIC,
    "box": Image.Resampling.BOX,  # area averaging
    "lanczos": Image.Resampling.LANCZOS,
}

# Image.rotate only supports the first three
_ROTATE_FILTERS = ("nearest", "bilinear", "bicubic")


@dataclass(frozen=True)
class PipelineConfig:
    """Controls how each layer is resampled and how many layers render at once."""

    resize_filter: str = "bilinear"
    rotate_filter: str = "bicubic"

    # Render pool size; 0 means one worker per CPU core
    max_workers: int = 0

    def __post_init__(self) -> None:
        if self.resize_filter not in RESAMPLE_FILTERS:
            raise ValueError(f"Unknown resize filter: {self.resize_filter}")
        if self.rotate_filter not in _ROTATE_FILTERS:
            raise ValueError(f"Unsupported rotate filter: {self.rotate_filter}")

    @property
    def resize_resample(self) -> Image.Resampling:
        return RESAMPLE_FILTERS[self.resize_filter]

    @property
    def rotate_resample(self) -> Image.Resampling:
        return RESAMPLE_FILTERS[self.rotate_filter]

    @property
    def worker_count(self) -> int:
        if self.max_workers > 0:
            return self.max_workers
        return os.cpu_count() or 1
