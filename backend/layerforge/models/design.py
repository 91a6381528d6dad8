"""Design and layer payloads, validated once at the API boundary.

Request bodies use the camelCase field names of the editor (``flipX``,
``zIndex``, ``cropW`` ...). Everything past these models works with the
frozen dataclasses in ``layerforge.engine.design``.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from layerforge.engine.design import (
    SUPPORTED_MIME_TYPES,
    AssetRef,
    CropRect,
    Design,
    Layer,
    LayerRef,
    LocalRef,
    PersistedRef,
)

# Smallest layer edge, in canvas pixels
MIN_LAYER_SIZE = 1.0

_CROP_FIELDS = ("crop_x", "crop_y", "crop_w", "crop_h")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        allow_inf_nan=False,
    )


class AssetPayload(CamelModel):
    id: str = Field(..., min_length=1)
    url: str = Field(..., min_length=1)
    mime_type: str = "image/png"
    original_name: str = ""
    width: int | None = Field(default=None, gt=0)
    height: int | None = Field(default=None, gt=0)

    @field_validator("mime_type")
    @classmethod
    def _supported_mime(cls, v: str) -> str:
        if v not in SUPPORTED_MIME_TYPES:
            raise ValueError(f"unsupported image type {v!r}")
        return v

    def to_domain(self) -> AssetRef:
        return AssetRef(
            id=self.id,
            url=self.url,
            mime_type=self.mime_type,
            original_name=self.original_name,
            width=self.width,
            height=self.height,
        )

    @classmethod
    def from_domain(cls, asset: AssetRef) -> AssetPayload:
        return cls(
            id=asset.id,
            url=asset.url,
            mime_type=asset.mime_type,
            original_name=asset.original_name,
            width=asset.width,
            height=asset.height,
        )


class LayerFields(CamelModel):
    """Transform attributes shared by every layer payload."""

    x: float = 0.0
    y: float = 0.0
    width: float = MIN_LAYER_SIZE
    height: float = MIN_LAYER_SIZE
    rotation: float = 0.0
    flip_x: bool = False
    flip_y: bool = False
    opacity: float = Field(default=1.0, ge=0.0, le=1.0)
    z_index: int = 0
    crop_x: float | None = None
    crop_y: float | None = None
    crop_w: float | None = None
    crop_h: float | None = None
    visible: bool = True
    locked: bool = False
    name: str = ""
    kind: Literal["base", "image"] = "image"
    asset: AssetPayload | None = None

    @field_validator("width", "height")
    @classmethod
    def _min_size(cls, v: float) -> float:
        return max(MIN_LAYER_SIZE, v)

    @model_validator(mode="after")
    def _crop_all_or_nothing(self) -> LayerFields:
        present = [getattr(self, f) is not None for f in _CROP_FIELDS]
        if any(present) and not all(present):
            raise ValueError("cropX, cropY, cropW and cropH must be given together")
        return self

    @property
    def crop(self) -> CropRect | None:
        if self.crop_x is None:
            return None
        return CropRect(self.crop_x, self.crop_y, self.crop_w, self.crop_h)

    def to_layer(self, ref: LayerRef) -> Layer:
        return Layer(
            ref=ref,
            x=self.x,
            y=self.y,
            width=self.width,
            height=self.height,
            asset=self.asset.to_domain() if self.asset else None,
            rotation=self.rotation,
            flip_x=self.flip_x,
            flip_y=self.flip_y,
            opacity=self.opacity,
            z_index=self.z_index,
            crop=self.crop,
            visible=self.visible,
            locked=self.locked,
            name=self.name,
            kind=self.kind,
        )

    @staticmethod
    def fields_from_layer(layer: Layer) -> dict:
        crop = layer.crop
        return {
            "x": layer.x,
            "y": layer.y,
            "width": layer.width,
            "height": layer.height,
            "rotation": layer.rotation,
            "flip_x": layer.flip_x,
            "flip_y": layer.flip_y,
            "opacity": layer.opacity,
            "z_index": layer.z_index,
            "crop_x": crop.x if crop else None,
            "crop_y": crop.y if crop else None,
            "crop_w": crop.width if crop else None,
            "crop_h": crop.height if crop else None,
            "visible": layer.visible,
            "locked": layer.locked,
            "name": layer.name,
            "kind": layer.kind,
            "asset": AssetPayload.from_domain(layer.asset) if layer.asset else None,
        }


class LayerCreate(LayerFields):
    design_id: str = Field(..., min_length=1)
    width: float
    height: float


class LayerUpdate(CamelModel):
    """Partial update; only fields present in the body are applied."""

    x: float | None = None
    y: float | None = None
    width: float | None = None
    height: float | None = None
    rotation: float | None = None
    flip_x: bool | None = None
    flip_y: bool | None = None
    opacity: float | None = Field(default=None, ge=0.0, le=1.0)
    z_index: int | None = None
    crop_x: float | None = None
    crop_y: float | None = None
    crop_w: float | None = None
    crop_h: float | None = None
    visible: bool | None = None
    locked: bool | None = None
    name: str | None = None
    asset: AssetPayload | None = None

    @field_validator("width", "height")
    @classmethod
    def _min_size(cls, v: float | None) -> float | None:
        return None if v is None else max(MIN_LAYER_SIZE, v)

    def changes(self) -> dict:
        """Fields the client actually sent (explicit nulls included, e.g. to clear a crop)."""
        return {k: getattr(self, k) for k in self.model_fields_set}


class LayerSnapshot(LayerFields):
    """A layer as the editor currently holds it, for in-memory geometry calls."""

    id: str = Field(..., min_length=1)
    persisted: bool = True

    def to_domain(self) -> Layer:
        ref: LayerRef = PersistedRef(self.id) if self.persisted else LocalRef(self.id)
        return self.to_layer(ref)


class LayerRecord(LayerFields):
    """Stored form of a layer."""

    id: str
    design_id: str
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    def to_domain(self) -> Layer:
        return self.to_layer(PersistedRef(self.id))


class DesignCreate(CamelModel):
    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)
    title: str = ""
    thumbnail: str | None = None


class DesignUpdate(CamelModel):
    title: str | None = None
    thumbnail: str | None = None


class DesignRecord(CamelModel):
    """Stored form of a design, layers embedded."""

    id: str
    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)
    title: str = ""
    thumbnail: str | None = None
    layers: list[LayerRecord] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    def to_domain(self) -> Design:
        return Design(
            id=self.id,
            width=self.width,
            height=self.height,
            layers=tuple(layer.to_domain() for layer in self.layers),
            title=self.title,
            thumbnail=self.thumbnail,
        )
