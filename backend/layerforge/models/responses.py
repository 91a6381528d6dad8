"""API response models."""

from __future__ import annotations

from pydantic import BaseModel, Field

from layerforge.models.design import CamelModel


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = "0.1.0"
    steps_registered: int = 0


class GuideSnapResponse(CamelModel):
    vertical_lines: list[float] = Field(default_factory=list)
    horizontal_lines: list[float] = Field(default_factory=list)
    x: float
    y: float
    width: float
    height: float
    rotation: float = 0.0
    snapped_x: bool = False
    snapped_y: bool = False


class DeleteResponse(CamelModel):
    id: str
    deleted: bool = True
    layers_removed: int = 0
