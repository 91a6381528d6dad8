"""Design store — JSON-file persistence of designs with their layers embedded.

One file per design under ``<data_dir>/designs/``. All records are held in
memory and written through on every change. ``get_design`` hands out frozen
snapshots, so an export never sees a half-applied edit.
"""

from __future__ import annotations

import logging
import threading
import uuid
from pathlib import Path

from pydantic import ValidationError

from layerforge.engine.design import Design
from layerforge.errors import (
    DesignNotFound,
    ImmutableAssetRef,
    InvalidDesign,
    LayerNotFound,
)
from layerforge.models.design import (
    DesignCreate,
    DesignRecord,
    DesignUpdate,
    LayerCreate,
    LayerRecord,
    LayerUpdate,
    utcnow,
)

logger = logging.getLogger(__name__)


def _new_id() -> str:
    return uuid.uuid4().hex


class DesignStore:
    """Design/layer records, optionally backed by a directory of JSON files."""

    def __init__(self, data_dir: Path | str | None = None) -> None:
        self._lock = threading.RLock()
        self._designs: dict[str, DesignRecord] = {}
        self._layer_index: dict[str, str] = {}  # layer id -> design id
        self.designs_dir: Path | None = None
        if data_dir is not None:
            self.designs_dir = Path(data_dir) / "designs"
            self.designs_dir.mkdir(parents=True, exist_ok=True)
            self._load()

    # ── Designs ──

    def create_design(self, req: DesignCreate) -> DesignRecord:
        record = DesignRecord(id=_new_id(), **req.model_dump())
        with self._lock:
            self._designs[record.id] = record
            self._save(record)
        logger.info("Created design %s (%dx%d)", record.id, record.width, record.height)
        return record

    def get_record(self, design_id: str) -> DesignRecord:
        with self._lock:
            record = self._designs.get(design_id)
            if record is None:
                raise DesignNotFound(design_id)
            return record.model_copy(deep=True)

    def get_design(self, design_id: str) -> Design:
        """Immutable snapshot of a design, ready for export."""
        with self._lock:
            record = self._designs.get(design_id)
            if record is None:
                raise DesignNotFound(design_id)
            return record.to_domain()

    def update_design(self, design_id: str, req: DesignUpdate) -> DesignRecord:
        with self._lock:
            record = self.get_record(design_id)
            changes = {k: getattr(req, k) for k in req.model_fields_set}
            updated = record.model_copy(update={**changes, "updated_at": utcnow()})
            self._designs[design_id] = updated
            self._save(updated)
            return updated.model_copy(deep=True)

    def delete_design(self, design_id: str) -> int:
        """Delete a design and its layers. Returns the number of layers removed."""
        with self._lock:
            record = self._designs.pop(design_id, None)
            if record is None:
                raise DesignNotFound(design_id)
            for layer in record.layers:
                self._layer_index.pop(layer.id, None)
            if self.designs_dir is not None:
                self._path(design_id).unlink(missing_ok=True)
        logger.info("Deleted design %s with %d layers", design_id, len(record.layers))
        return len(record.layers)

    # ── Layers ──

    def create_layer(self, req: LayerCreate) -> LayerRecord:
        with self._lock:
            record = self.get_record(req.design_id)
            layer = LayerRecord(id=_new_id(), **req.model_dump())
            if layer.kind == "base" and any(existing.kind == "base" for existing in record.layers):
                raise InvalidDesign(
                    f"Design {record.id} already has a base layer",
                    design_id=record.id,
                )
            record.layers.append(layer)
            record.updated_at = utcnow()
            self._designs[record.id] = record
            self._layer_index[layer.id] = record.id
            self._save(record)
            return layer.model_copy(deep=True)

    def get_layer(self, layer_id: str) -> LayerRecord:
        with self._lock:
            record, index = self._locate(layer_id)
            return record.layers[index].model_copy(deep=True)

    def update_layer(self, layer_id: str, req: LayerUpdate) -> LayerRecord:
        changes = req.changes()
        with self._lock:
            record, index = self._locate(layer_id)
            current = record.layers[index]

            if "asset" in changes:
                new_asset = changes.pop("asset")
                old_id = current.asset.id if current.asset else None
                new_id = new_asset.id if new_asset else None
                if current.asset is not None and new_id != old_id:
                    raise ImmutableAssetRef(
                        f"Layer {layer_id} already references asset {old_id}; "
                        "create a new layer to change the image",
                        layer_id=layer_id,
                    )
                if current.asset is None and new_asset is not None:
                    changes["asset"] = new_asset.model_dump()

            merged = {**current.model_dump(), **changes, "updated_at": utcnow()}
            try:
                updated = LayerRecord.model_validate(merged)
            except ValidationError as e:
                raise InvalidDesign(
                    f"Invalid update for layer {layer_id}",
                    errors=[err["msg"] for err in e.errors()],
                ) from e

            record = record.model_copy(deep=True)
            record.layers[index] = updated
            record.updated_at = updated.updated_at
            self._designs[record.id] = record
            self._save(record)
            return updated.model_copy(deep=True)

    def delete_layer(self, layer_id: str) -> None:
        with self._lock:
            record, index = self._locate(layer_id)
            record = record.model_copy(deep=True)
            del record.layers[index]
            record.updated_at = utcnow()
            self._designs[record.id] = record
            self._layer_index.pop(layer_id, None)
            self._save(record)

    @property
    def count(self) -> int:
        return len(self._designs)

    # ── Internals ──

    def _locate(self, layer_id: str) -> tuple[DesignRecord, int]:
        design_id = self._layer_index.get(layer_id)
        record = self._designs.get(design_id) if design_id else None
        if record is None:
            raise LayerNotFound(layer_id)
        for i, layer in enumerate(record.layers):
            if layer.id == layer_id:
                return record, i
        raise LayerNotFound(layer_id)

    def _path(self, design_id: str) -> Path:
        assert self.designs_dir is not None
        return self.designs_dir / f"{design_id}.json"

    def _save(self, record: DesignRecord) -> None:
        if self.designs_dir is None:
            return
        path = self._path(record.id)
        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(record.model_dump_json(indent=2), encoding="utf-8")
        tmp.replace(path)

    def _load(self) -> None:
        assert self.designs_dir is not None
        for path in sorted(self.designs_dir.glob("*.json")):
            try:
                record = DesignRecord.model_validate_json(path.read_text(encoding="utf-8"))
            except (OSError, ValidationError) as e:
                logger.warning("Skipping unreadable design file %s: %s", path.name, e)
                continue
            self._designs[record.id] = record
            for layer in record.layers:
                self._layer_index[layer.id] = record.id
        logger.info("Loaded %d designs from %s", len(self._designs), self.designs_dir)


_store: DesignStore | None = None


def get_design_store() -> DesignStore:
    """Get or create the global DesignStore singleton."""
    global _store
    if _store is None:
        from layerforge.config import settings

        _store = DesignStore(settings.data_dir)
    return _store
