"""One immutable EditorState value per editing transaction.

The canvas view, the snapping guides and the export serializer all read the
same EditorState value; edits produce a new one (see ``operations``).
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace

from layerforge.engine.design import Design, Layer, LayerRef, LocalRef
from layerforge.engine.guides import DEFAULT_SNAP_TOLERANCE, GuideLines, compute_guides


def new_local_ref() -> LocalRef:
    """Temporary id for a layer the persistence boundary has not seen yet."""
    return LocalRef(f"layer-{uuid.uuid4().hex[:12]}")


@dataclass(frozen=True)
class EditorState:
    canvas_width: int
    canvas_height: int
    layers: tuple[Layer, ...] = field(default_factory=tuple)
    design_id: str | None = None
    title: str = ""
    selected: LayerRef | None = None
    cropping: LayerRef | None = None
    show_guides: bool = True
    snap_tolerance: float = DEFAULT_SNAP_TOLERANCE
    # Guide lines the last move or transform snapped to, per axis
    active_guides: tuple[float | None, float | None] = (None, None)

    @classmethod
    def from_design(cls, design: Design, **options) -> EditorState:
        return cls(
            canvas_width=design.width,
            canvas_height=design.height,
            layers=design.layers,
            design_id=design.id,
            title=design.title,
            **options,
        )

    def to_design(self, design_id: str | None = None) -> Design:
        """Snapshot for export. Local-only layers are included as they are."""
        resolved = design_id or self.design_id
        if resolved is None:
            raise ValueError("EditorState has no design id to export under")
        return Design(
            id=resolved,
            width=self.canvas_width,
            height=self.canvas_height,
            layers=self.layers,
            title=self.title,
        )

    def get(self, ref: LayerRef) -> Layer | None:
        for layer in self.layers:
            if layer.ref == ref:
                return layer
        return None

    def find(self, layer_id: str) -> Layer | None:
        """Lookup by plain id, whichever ref variant the layer carries."""
        for layer in self.layers:
            if layer.id == layer_id:
                return layer
        return None

    def guides_for(self, ref: LayerRef | None) -> GuideLines:
        return compute_guides(self.canvas_width, self.canvas_height, self.layers, ref)

    def evolve(self, **changes) -> EditorState:
        return replace(self, **changes)

    def with_layer(self, layer: Layer) -> EditorState:
        """Replace the layer carrying ``layer.ref``."""
        return self.evolve(
            layers=tuple(layer if existing.ref == layer.ref else existing for existing in self.layers)
        )
