"""API request models."""

from __future__ import annotations

from pydantic import Field

from layerforge.models.design import CamelModel, LayerSnapshot


class GuideSnapRequest(CamelModel):
    canvas_width: int = Field(..., gt=0)
    canvas_height: int = Field(..., gt=0)
    layers: list[LayerSnapshot] = Field(default_factory=list, description="Live layer set")
    moving_layer_id: str = Field(..., min_length=1)
    x: float | None = Field(default=None, description="Proposed top-left x")
    y: float | None = Field(default=None, description="Proposed top-left y")
    width: float | None = Field(default=None, description="New width for a resize edit")
    height: float | None = Field(default=None, description="New height for a resize edit")
    rotation: float | None = None
    tolerance: float | None = Field(default=None, ge=0.0)
    show_guides: bool = True

    @property
    def is_transform(self) -> bool:
        return any(v is not None for v in (self.width, self.height, self.rotation))
