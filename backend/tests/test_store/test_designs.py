"""Tests for the JSON-file design store."""

from __future__ import annotations

import pytest

from layerforge.engine.design import Design, PersistedRef
from layerforge.errors import DesignNotFound, ImmutableAssetRef, InvalidDesign, LayerNotFound
from layerforge.models.design import (
    AssetPayload,
    DesignCreate,
    DesignUpdate,
    LayerCreate,
    LayerUpdate,
)
from layerforge.storage.designs import DesignStore


def _asset(asset_id: str = "a1") -> AssetPayload:
    return AssetPayload(id=asset_id, url=f"{asset_id}.png", mime_type="image/png")


def _layer(design_id: str, **kwargs) -> LayerCreate:
    kwargs.setdefault("width", 50)
    kwargs.setdefault("height", 40)
    return LayerCreate(design_id=design_id, **kwargs)


def test_create_and_get(store):
    record = store.create_design(DesignCreate(width=200, height=100, title="Poster"))
    fetched = store.get_record(record.id)
    assert fetched.title == "Poster"
    assert (fetched.width, fetched.height) == (200, 100)
    assert store.count == 1


def test_missing_design(store):
    with pytest.raises(DesignNotFound):
        store.get_design("nope")
    with pytest.raises(DesignNotFound):
        store.delete_design("nope")


def test_get_design_returns_snapshot(store):
    record = store.create_design(DesignCreate(width=200, height=100))
    layer = store.create_layer(_layer(record.id, asset=_asset(), z_index=2))

    snapshot = store.get_design(record.id)
    assert isinstance(snapshot, Design)
    assert snapshot.layers[0].ref == PersistedRef(layer.id)
    assert snapshot.layers[0].asset.url == "a1.png"

    store.update_layer(layer.id, LayerUpdate(x=99))
    # earlier snapshot is unaffected
    assert snapshot.layers[0].x == 0


def test_update_design_title(store):
    record = store.create_design(DesignCreate(width=10, height=10))
    updated = store.update_design(record.id, DesignUpdate(title="Renamed"))
    assert updated.title == "Renamed"
    assert updated.width == 10


def test_second_base_layer_rejected(store):
    record = store.create_design(DesignCreate(width=10, height=10))
    store.create_layer(_layer(record.id, kind="base"))
    with pytest.raises(InvalidDesign):
        store.create_layer(_layer(record.id, kind="base"))


def test_layer_for_missing_design(store):
    with pytest.raises(DesignNotFound):
        store.create_layer(_layer("ghost"))


def test_partial_update_keeps_other_fields(store):
    record = store.create_design(DesignCreate(width=10, height=10))
    layer = store.create_layer(_layer(record.id, x=5, rotation=45, name="Logo"))

    updated = store.update_layer(layer.id, LayerUpdate.model_validate({"opacity": 0.25}))
    assert updated.opacity == 0.25
    assert updated.x == 5
    assert updated.rotation == 45
    assert updated.name == "Logo"
    assert updated.updated_at >= layer.updated_at


def test_crop_can_be_cleared(store):
    record = store.create_design(DesignCreate(width=10, height=10))
    layer = store.create_layer(_layer(record.id, crop_x=0, crop_y=0, crop_w=4, crop_h=4))

    cleared = store.update_layer(
        layer.id,
        LayerUpdate.model_validate({"cropX": None, "cropY": None, "cropW": None, "cropH": None}),
    )
    assert cleared.crop is None


def test_half_crop_update_rejected(store):
    record = store.create_design(DesignCreate(width=10, height=10))
    layer = store.create_layer(_layer(record.id))
    with pytest.raises(InvalidDesign):
        store.update_layer(layer.id, LayerUpdate.model_validate({"cropX": 1}))


def test_asset_is_immutable(store):
    record = store.create_design(DesignCreate(width=10, height=10))
    layer = store.create_layer(_layer(record.id, asset=_asset("a1")))

    with pytest.raises(ImmutableAssetRef):
        store.update_layer(layer.id, LayerUpdate(asset=_asset("a2")))
    # resending the same asset is fine
    same = store.update_layer(layer.id, LayerUpdate(asset=_asset("a1"), x=3))
    assert same.asset.id == "a1"
    assert same.x == 3


def test_asset_can_be_set_once(store):
    record = store.create_design(DesignCreate(width=10, height=10))
    layer = store.create_layer(_layer(record.id))
    updated = store.update_layer(layer.id, LayerUpdate(asset=_asset("late")))
    assert updated.asset.id == "late"


def test_delete_layer(store):
    record = store.create_design(DesignCreate(width=10, height=10))
    layer = store.create_layer(_layer(record.id))
    store.delete_layer(layer.id)
    with pytest.raises(LayerNotFound):
        store.get_layer(layer.id)
    assert store.get_record(record.id).layers == []


def test_delete_design_cascades(store):
    record = store.create_design(DesignCreate(width=10, height=10))
    layers = [store.create_layer(_layer(record.id)) for _ in range(3)]

    assert store.delete_design(record.id) == 3
    for layer in layers:
        with pytest.raises(LayerNotFound):
            store.get_layer(layer.id)


def test_records_survive_reload(tmp_path):
    first = DesignStore(tmp_path)
    record = first.create_design(DesignCreate(width=64, height=32, title="Saved"))
    layer = first.create_layer(_layer(record.id, asset=_asset()))

    second = DesignStore(tmp_path)
    assert second.get_record(record.id).title == "Saved"
    assert second.get_layer(layer.id).asset.id == "a1"


def test_deleted_design_not_reloaded(tmp_path):
    first = DesignStore(tmp_path)
    record = first.create_design(DesignCreate(width=64, height=32))
    first.delete_design(record.id)
    assert DesignStore(tmp_path).count == 0


def test_unreadable_file_skipped(tmp_path):
    designs_dir = tmp_path / "designs"
    designs_dir.mkdir()
    (designs_dir / "broken.json").write_text("{not json", encoding="utf-8")
    assert DesignStore(tmp_path).count == 0


def test_memory_only_store():
    store = DesignStore()
    record = store.create_design(DesignCreate(width=1, height=1))
    assert store.get_record(record.id).id == record.id
    assert store.designs_dir is None
