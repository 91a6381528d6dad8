"""Shared test fixtures."""

from __future__ import annotations

import io

import numpy as np
import pytest
from PIL import Image

from layerforge.engine.design import AssetRef, Layer, PersistedRef
from layerforge.errors import AssetUnavailable
from layerforge.storage.designs import DesignStore

RED = (255, 0, 0, 255)
BLUE = (0, 0, 255, 255)
GREEN = (0, 255, 0, 255)


def png_bytes(image: Image.Image) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def solid_png(color: tuple[int, int, int, int], size: tuple[int, int] = (8, 8)) -> bytes:
    return png_bytes(Image.new("RGBA", size, color))


def gradient_image(width: int = 12, height: int = 8) -> Image.Image:
    """No two pixels alike and no symmetry, so flips and rotations show up."""
    ys, xs = np.mgrid[0:height, 0:width]
    pixels = np.stack(
        [xs * 20 % 256, ys * 30 % 256, (xs * 7 + ys * 13) % 256, np.full_like(xs, 255)],
        axis=-1,
    ).astype(np.uint8)
    return Image.fromarray(pixels)


def make_layer(layer_id: str = "layer-1", **kwargs) -> Layer:
    kwargs.setdefault("width", 12.0)
    kwargs.setdefault("height", 8.0)
    return Layer(ref=PersistedRef(layer_id), **kwargs)


def asset(asset_id: str, url: str | None = None) -> AssetRef:
    return AssetRef(id=asset_id, url=url or f"{asset_id}.png", mime_type="image/png")


class StaticAssetSource:
    """In-memory asset bytes keyed by asset id."""

    def __init__(self, blobs: dict[str, bytes]) -> None:
        self.blobs = blobs
        self.fetched: list[str] = []

    async def fetch(self, asset: AssetRef) -> bytes:
        self.fetched.append(asset.id)
        if asset.id not in self.blobs:
            raise AssetUnavailable(f"No asset {asset.id}", asset_id=asset.id)
        return self.blobs[asset.id]


@pytest.fixture
def upload_dir(tmp_path):
    path = tmp_path / "uploads"
    path.mkdir()
    (path / "red.png").write_bytes(solid_png(RED))
    (path / "blue.png").write_bytes(solid_png(BLUE))
    return path


@pytest.fixture
def store(tmp_path) -> DesignStore:
    return DesignStore(tmp_path / "data")


@pytest.fixture
def client(store, upload_dir):
    from fastapi.testclient import TestClient

    from layerforge.dependencies import get_exporter, get_store
    from layerforge.engine.exporter import DesignExporter
    from layerforge.main import app
    from layerforge.storage.assets import LocatorAssetSource

    exporter = DesignExporter(LocatorAssetSource(upload_dir), max_workers=2)
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_exporter] = lambda: exporter
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    exporter.close()
