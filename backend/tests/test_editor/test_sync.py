"""Tests for planning store writes from editor changes."""

from __future__ import annotations

import pytest

from layerforge.editor import operations as ops
from layerforge.editor.state import EditorState
from layerforge.editor.sync import SyncQueue, diff_states, layer_changes, persisted_id
from layerforge.engine.design import CropRect, LocalRef, PersistedRef
from tests.conftest import make_layer

LOCAL = LocalRef("layer-new")
SAVED = PersistedRef("a")


@pytest.fixture
def state() -> EditorState:
    saved = make_layer("a", x=10, y=10)
    local = make_layer("tmp", x=50, y=50).evolve(ref=LOCAL)
    return EditorState(canvas_width=400, canvas_height=400, layers=(saved, local), show_guides=False)


def test_persisted_id_dispatch():
    assert persisted_id(PersistedRef("x")) == "x"
    assert persisted_id(LocalRef("x")) is None
    with pytest.raises(TypeError):
        persisted_id("x")


def test_changes_only_list_modified_fields():
    before = make_layer("a")
    after = before.evolve(x=5, opacity=0.5)
    assert layer_changes(before, after) == {"x": 5, "opacity": 0.5}


def test_crop_changes_travel_together():
    before = make_layer("a", crop=CropRect(0, 0, 4, 4))
    after = before.evolve(crop=CropRect(0, 0, 4, 6))
    assert layer_changes(before, after) == {"crop_x": 0, "crop_y": 0, "crop_w": 4, "crop_h": 6}

    cleared = layer_changes(before, before.evolve(crop=None))
    assert cleared == {"crop_x": None, "crop_y": None, "crop_w": None, "crop_h": None}


def test_persisted_layer_patched_immediately(state):
    moved = ops.nudge(state, SAVED, dx=1)
    queue, patches = diff_states(state, moved)

    assert queue.pending == {}
    assert len(patches) == 1
    assert patches[0].layer_id == "a"
    assert patches[0].changes == {"x": 11}


def test_local_layer_queued_until_promoted(state):
    moved = ops.nudge(state, LOCAL, dx=1)
    moved2 = ops.flip(moved, LOCAL)

    queue, patches = diff_states(state, moved)
    queue, more = diff_states(moved, moved2, queue)
    assert patches == [] and more == []
    assert queue.pending == {"layer-new": {"x": 51, "flip_x": True}}

    queue, patch = queue.flush(LOCAL, PersistedRef("srv-9"))
    assert queue.pending == {}
    assert patch.layer_id == "srv-9"
    update = patch.to_update()
    assert update.changes() == {"x": 51, "flip_x": True}


def test_flush_without_pending_changes():
    queue, patch = SyncQueue().flush(LOCAL, PersistedRef("srv-1"))
    assert patch is None
    assert queue.pending == {}


def test_discard_drops_queue(state):
    queue, _ = diff_states(state, ops.nudge(state, LOCAL, dy=2))
    assert queue.discard(LOCAL).pending == {}


def test_added_layers_are_not_patched(state):
    added = ops.add_layer(state, make_layer("b"))
    _, patches = diff_states(state, added)
    assert patches == []
