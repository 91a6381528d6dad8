"""Editing operations. Each takes an EditorState and returns a new one.

Unknown refs and locked layers leave the state unchanged; ``locked`` only
guards interactive edits and has no effect on rendering.
"""

from __future__ import annotations

import logging

from layerforge.editor.state import EditorState, new_local_ref
from layerforge.engine.design import CropRect, Layer, LayerRef, LocalRef, PersistedRef
from layerforge.engine.guides import find_line
from layerforge.models.design import MIN_LAYER_SIZE

logger = logging.getLogger(__name__)

NUDGE_STEP = 1.0
NUDGE_STEP_LARGE = 10.0
DUPLICATE_OFFSET = 10.0


def add_layer(state: EditorState, layer: Layer) -> EditorState:
    if state.get(layer.ref) is not None:
        raise ValueError(f"Layer {layer.id} is already in the editor")
    if layer.is_base and any(existing.is_base for existing in state.layers):
        raise ValueError("Editor already has a base layer")
    return state.evolve(layers=state.layers + (layer,), selected=layer.ref)


def delete_layer(state: EditorState, ref: LayerRef) -> EditorState:
    if state.get(ref) is None:
        return state
    return state.evolve(
        layers=tuple(layer for layer in state.layers if layer.ref != ref),
        selected=None if state.selected == ref else state.selected,
        cropping=None if state.cropping == ref else state.cropping,
    )


def select(state: EditorState, ref: LayerRef | None) -> EditorState:
    if ref is not None and state.get(ref) is None:
        return state
    return state.evolve(selected=ref)


def toggle_guides(state: EditorState) -> EditorState:
    return state.evolve(show_guides=not state.show_guides)


def _editable(state: EditorState, ref: LayerRef) -> Layer | None:
    layer = state.get(ref)
    if layer is None:
        logger.debug("Ignoring edit on unknown layer %s", ref)
        return None
    if layer.locked:
        logger.debug("Ignoring edit on locked layer %s", ref)
        return None
    return layer


def move_layer(
    state: EditorState,
    ref: LayerRef,
    x: float | None = None,
    y: float | None = None,
) -> EditorState:
    """Drag a layer to (x, y). With guides on, the layer centre snaps per axis."""
    layer = _editable(state, ref)
    if layer is None:
        return state
    new_x, new_y, line_x, line_y = _snapped(state, layer, x, y, layer.width, layer.height)
    return state.with_layer(layer.evolve(x=new_x, y=new_y)).evolve(active_guides=(line_x, line_y))


def transform_layer(
    state: EditorState,
    ref: LayerRef,
    x: float | None = None,
    y: float | None = None,
    width: float | None = None,
    height: float | None = None,
    rotation: float | None = None,
) -> EditorState:
    """Resize/rotate handle edit. Snapping uses the new size."""
    layer = _editable(state, ref)
    if layer is None:
        return state
    new_w = layer.width if width is None else max(MIN_LAYER_SIZE, width)
    new_h = layer.height if height is None else max(MIN_LAYER_SIZE, height)
    new_x, new_y, line_x, line_y = _snapped(state, layer, x, y, new_w, new_h)
    return state.with_layer(
        layer.evolve(
            x=new_x,
            y=new_y,
            width=new_w,
            height=new_h,
            rotation=layer.rotation if rotation is None else rotation,
        )
    ).evolve(active_guides=(line_x, line_y))


def _snapped(
    state: EditorState,
    layer: Layer,
    x: float | None,
    y: float | None,
    width: float,
    height: float,
) -> tuple[float, float, float | None, float | None]:
    """New top-left plus the guide line each axis snapped to (None if it did not)."""
    new_x = layer.x if x is None else x
    new_y = layer.y if y is None else y
    if not state.show_guides:
        return new_x, new_y, None, None

    guides = state.guides_for(layer.ref)
    line_x = line_y = None
    if x is not None:
        line_x = find_line(x + width / 2, guides.vertical, state.snap_tolerance)
        if line_x is not None:
            new_x = line_x - width / 2
    if y is not None:
        line_y = find_line(y + height / 2, guides.horizontal, state.snap_tolerance)
        if line_y is not None:
            new_y = line_y - height / 2
    return new_x, new_y, line_x, line_y


def nudge(
    state: EditorState,
    ref: LayerRef,
    dx: int = 0,
    dy: int = 0,
    large: bool = False,
) -> EditorState:
    """Arrow-key move by whole steps (10 px with shift). No snapping."""
    layer = _editable(state, ref)
    if layer is None:
        return state
    amount = NUDGE_STEP_LARGE if large else NUDGE_STEP
    return state.with_layer(layer.evolve(x=layer.x + dx * amount, y=layer.y + dy * amount))


def toggle_visibility(state: EditorState, ref: LayerRef) -> EditorState:
    layer = state.get(ref)
    if layer is None:
        return state
    return state.with_layer(layer.evolve(visible=not layer.visible))


def set_opacity(state: EditorState, ref: LayerRef, opacity: float) -> EditorState:
    layer = _editable(state, ref)
    if layer is None:
        return state
    return state.with_layer(layer.evolve(opacity=min(1.0, max(0.0, opacity))))


def set_locked(state: EditorState, ref: LayerRef, locked: bool) -> EditorState:
    layer = state.get(ref)
    if layer is None:
        return state
    return state.with_layer(layer.evolve(locked=locked))


def flip(state: EditorState, ref: LayerRef, horizontal: bool = True) -> EditorState:
    layer = _editable(state, ref)
    if layer is None:
        return state
    if horizontal:
        return state.with_layer(layer.evolve(flip_x=not layer.flip_x))
    return state.with_layer(layer.evolve(flip_y=not layer.flip_y))


def begin_crop(state: EditorState, ref: LayerRef | None) -> EditorState:
    if ref is not None and _editable(state, ref) is None:
        return state
    return state.evolve(cropping=ref)


def set_crop(state: EditorState, ref: LayerRef, crop: CropRect | None) -> EditorState:
    """Apply (or clear) the crop rectangle and leave crop mode."""
    layer = _editable(state, ref)
    if layer is None:
        return state
    updated = state.with_layer(layer.evolve(crop=crop))
    if updated.cropping == ref:
        updated = updated.evolve(cropping=None)
    return updated


def reorder(state: EditorState, ref: LayerRef, direction: str) -> EditorState:
    """Move a layer one step "up" (towards the top) or "down" in paint order.

    The base layer stays at the bottom with z-index 0; the others are
    renumbered 1..n in their new order.
    """
    if direction not in ("up", "down"):
        raise ValueError(f"direction must be 'up' or 'down', got {direction!r}")
    layer = state.get(ref)
    if layer is None or layer.is_base:
        return state

    stack = [lyr for lyr in sorted(state.layers, key=lambda lyr: lyr.z_index) if not lyr.is_base]
    index = next(i for i, lyr in enumerate(stack) if lyr.ref == ref)
    target = index + 1 if direction == "up" else index - 1
    if target < 0 or target >= len(stack):
        return state
    stack[index], stack[target] = stack[target], stack[index]

    z_by_ref = {lyr.ref: i + 1 for i, lyr in enumerate(stack)}
    return state.evolve(
        layers=tuple(
            lyr.evolve(z_index=0) if lyr.is_base else lyr.evolve(z_index=z_by_ref[lyr.ref])
            for lyr in state.layers
        )
    )


def duplicate_layer(
    state: EditorState,
    ref: LayerRef,
    new_ref: LocalRef | None = None,
) -> EditorState:
    """Copy a layer on top of the stack, offset by 10 px, under a new local ref."""
    layer = state.get(ref)
    if layer is None:
        return state
    top = max((lyr.z_index for lyr in state.layers), default=0)
    copy = layer.evolve(
        ref=new_ref or new_local_ref(),
        name=f"{layer.name} copy" if layer.name else "copy",
        x=layer.x + DUPLICATE_OFFSET,
        y=layer.y + DUPLICATE_OFFSET,
        z_index=top + 1,
        kind="image",
        locked=False,
    )
    return state.evolve(layers=state.layers + (copy,), selected=copy.ref)


def promote(state: EditorState, local: LocalRef, persisted: PersistedRef) -> EditorState:
    """Swap a local ref for the id the persistence boundary issued."""
    layer = state.get(local)
    if layer is None:
        return state

    def swap(ref: LayerRef | None) -> LayerRef | None:
        return persisted if ref == local else ref

    return state.evolve(
        layers=tuple(
            lyr.evolve(ref=persisted) if lyr.ref == local else lyr for lyr in state.layers
        ),
        selected=swap(state.selected),
        cropping=swap(state.cropping),
    )
