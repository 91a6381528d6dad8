"""Design snapshot — the immutable input of every export and snapping call.

Everything here is a frozen dataclass: an export works on the snapshot it
was handed, and editing produces new values instead of mutating old ones.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Union

SUPPORTED_MIME_TYPES = frozenset({"image/jpeg", "image/png", "image/webp", "image/gif"})

BASE_KIND = "base"
IMAGE_KIND = "image"


@dataclass(frozen=True)
class LocalRef:
    """Layer created in the editor and not saved yet."""

    temp_id: str

    def __str__(self) -> str:
        return self.temp_id


@dataclass(frozen=True)
class PersistedRef:
    """Layer known to the persistence boundary under a server-issued id."""

    id: str

    def __str__(self) -> str:
        return self.id


LayerRef = Union[LocalRef, PersistedRef]


@dataclass(frozen=True)
class AssetRef:
    id: str
    url: str
    mime_type: str = "image/png"
    original_name: str = ""
    # Cached hints only; real dimensions come from decoding the bytes
    width: int | None = None
    height: int | None = None


@dataclass(frozen=True)
class CropRect:
    """Crop rectangle in source-image pixels."""

    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class Layer:
    ref: LayerRef
    x: float = 0.0
    y: float = 0.0
    width: float = 1.0
    height: float = 1.0
    asset: AssetRef | None = None
    rotation: float = 0.0
    flip_x: bool = False
    flip_y: bool = False
    opacity: float = 1.0
    z_index: int = 0
    crop: CropRect | None = None
    visible: bool = True
    locked: bool = False
    name: str = ""
    kind: str = IMAGE_KIND

    @property
    def id(self) -> str:
        return str(self.ref)

    @property
    def center(self) -> tuple[float, float]:
        return (self.x + self.width / 2, self.y + self.height / 2)

    @property
    def is_base(self) -> bool:
        return self.kind == BASE_KIND

    def evolve(self, **changes) -> Layer:
        return replace(self, **changes)


@dataclass(frozen=True)
class Design:
    id: str
    width: int
    height: int
    layers: tuple[Layer, ...] = field(default_factory=tuple)
    title: str = ""
    thumbnail: str | None = None

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Design canvas must be positive, got {self.width}x{self.height}")
        bases = [layer.id for layer in self.layers if layer.is_base]
        if len(bases) > 1:
            raise ValueError(f"Design {self.id} has more than one base layer: {bases}")
