"""Immutable editing state and the operations over it."""

from layerforge.editor.state import EditorState, new_local_ref
from layerforge.editor.sync import LayerPatch, SyncQueue, diff_states, persisted_id

__all__ = [
    "EditorState",
    "new_local_ref",
    "LayerPatch",
    "SyncQueue",
    "diff_states",
    "persisted_id",
]
