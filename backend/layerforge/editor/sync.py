"""Editor → persistence planning.

Only ``PersistedRef`` layers can be written through to the store. Changes to
``LocalRef`` layers are queued until the layer is saved and promoted, then
replayed as one patch against the new id.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from layerforge.editor.state import EditorState
from layerforge.engine.design import Layer, LayerRef, LocalRef, PersistedRef
from layerforge.models.design import LayerFields, LayerUpdate

# Layer attributes the store accepts in an update
_PATCHABLE = (
    "x",
    "y",
    "width",
    "height",
    "rotation",
    "flip_x",
    "flip_y",
    "opacity",
    "z_index",
    "visible",
    "locked",
    "name",
)
_CROP_FIELDS = ("crop_x", "crop_y", "crop_w", "crop_h")


@dataclass(frozen=True)
class LayerPatch:
    layer_id: str
    changes: dict[str, Any]

    def to_update(self) -> LayerUpdate:
        return LayerUpdate.model_validate(self.changes)


def persisted_id(ref: LayerRef) -> str | None:
    """Store id for persisted layers; None for local ones."""
    if isinstance(ref, PersistedRef):
        return ref.id
    if isinstance(ref, LocalRef):
        return None
    raise TypeError(f"Not a layer ref: {ref!r}")


def layer_changes(before: Layer, after: Layer) -> dict[str, Any]:
    """Patchable fields that differ between two versions of a layer.

    Crop fields travel as a group so the store never sees half a rectangle.
    """
    old = LayerFields.fields_from_layer(before)
    new = LayerFields.fields_from_layer(after)
    changes = {name: new[name] for name in _PATCHABLE if old[name] != new[name]}
    if before.crop != after.crop:
        changes.update({name: new[name] for name in _CROP_FIELDS})
    return changes


@dataclass(frozen=True)
class SyncQueue:
    # temp id -> changes accumulated while the layer was local
    pending: dict[str, dict[str, Any]] = field(default_factory=dict)

    def record(self, ref: LayerRef, changes: dict[str, Any]) -> tuple[SyncQueue, LayerPatch | None]:
        """Patch to send now, or the queue with ``changes`` held back."""
        if not changes:
            return self, None
        layer_id = persisted_id(ref)
        if layer_id is not None:
            return self, LayerPatch(layer_id, dict(changes))
        key = str(ref)
        merged = {**self.pending.get(key, {}), **changes}
        return SyncQueue({**self.pending, key: merged}), None

    def flush(self, local: LocalRef, persisted: PersistedRef) -> tuple[SyncQueue, LayerPatch | None]:
        """Replay queued changes once ``local`` has been saved as ``persisted``."""
        key = str(local)
        if key not in self.pending:
            return self, None
        remaining = {k: v for k, v in self.pending.items() if k != key}
        return SyncQueue(remaining), LayerPatch(persisted.id, self.pending[key])

    def discard(self, local: LocalRef) -> SyncQueue:
        return SyncQueue({k: v for k, v in self.pending.items() if k != str(local)})


def diff_states(
    before: EditorState,
    after: EditorState,
    queue: SyncQueue | None = None,
) -> tuple[SyncQueue, list[LayerPatch]]:
    """Patches needed to bring the store from ``before`` to ``after``.

    Layers added or removed between the two states are not covered; creating
    and deleting go through their own calls.
    """
    queue = queue or SyncQueue()
    patches: list[LayerPatch] = []
    for new in after.layers:
        old = before.get(new.ref)
        if old is None:
            continue
        queue, patch = queue.record(new.ref, layer_changes(old, new))
        if patch is not None:
            patches.append(patch)
    return queue, patches
