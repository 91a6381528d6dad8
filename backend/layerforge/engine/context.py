"""The mutable state one layer carries through the render steps.

A context lives for exactly one layer render and is never shared between
layers, so renders of different layers can run on different threads.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np
from numpy.typing import NDArray
from PIL import Image

from layerforge.engine.config import PipelineConfig
from layerforge.engine.design import Layer


@dataclass
class RenderContext:
    """Shared state flowing through the crop/resize/flip/rotate steps."""

    layer: Layer
    # Working buffer; replaced by each step
    image: Image.Image
    config: PipelineConfig = field(default_factory=PipelineConfig)
    # Decoded source dimensions (authoritative, not the AssetRef hints)
    source_size: tuple[int, int] = (0, 0)
    # Crop box actually applied, after clamping: (left, top, right, bottom)
    crop_box: tuple[int, int, int, int] | None = None
    # Normalized clockwise rotation in [0, 360)
    rotation: float = 0.0

    completed_steps: list[str] = field(default_factory=list)

    @property
    def target_size(self) -> tuple[int, int]:
        """Resize target in whole pixels, never below 1x1."""
        return (
            max(1, int(round(self.layer.width))),
            max(1, int(round(self.layer.height))),
        )


@dataclass(frozen=True)
class RenderedLayer:
    """A layer rendered to RGBA and positioned on the canvas."""

    layer_id: str
    pixels: NDArray[np.uint8]  # H x W x 4, straight alpha
    origin_x: int
    origin_y: int
    opacity: float = 1.0
    z_index: int = 0
    visible: bool = True

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])
