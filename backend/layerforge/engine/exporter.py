"""Design exporter — fetch, render (in parallel), composite (in order), encode.

Each layer is fetched and rendered as its own task; a layer's render starts as
soon as its own bytes arrive. The composite waits for every task because blend
order is part of the result. Per-layer errors drop that layer and are reported
in ``ExportResult.skipped``; cancelling the export cancels all pending work.
"""

from __future__ import annotations

import asyncio
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

import numpy as np
from numpy.typing import NDArray

from layerforge.engine.compositor import composite
from layerforge.engine.context import RenderedLayer
from layerforge.engine.design import Design, Layer
from layerforge.engine.pipeline import Pipeline, create_pipeline
from layerforge.errors import AssetUnavailable, LayerRenderError
from layerforge.storage.assets import AssetSource
from layerforge.utils.imaging import encode_png

logger = logging.getLogger(__name__)


@dataclass
class ExportResult:
    design_id: str
    pixels: NDArray[np.uint8]
    rendered: list[str] = field(default_factory=list)
    # layer id -> error code
    skipped: dict[str, str] = field(default_factory=dict)
    png: bytes = b""
    elapsed_ms: float = 0.0

    @property
    def filename(self) -> str:
        return export_filename(self.design_id)


def export_filename(design_id: str) -> str:
    return f"design-{design_id}.png"


class DesignExporter:
    """Renders Design snapshots. One instance serves many concurrent exports."""

    def __init__(
        self,
        asset_source: AssetSource,
        pipeline: Pipeline | None = None,
        max_workers: int | None = None,
    ) -> None:
        self.asset_source = asset_source
        self.pipeline = pipeline or create_pipeline()
        workers = max_workers or self.pipeline.config.worker_count
        self._executor = ThreadPoolExecutor(
            max_workers=workers,
            thread_name_prefix="layerforge-render",
        )
        logger.info("DesignExporter ready with %d render workers", workers)

    async def render(self, design: Design) -> ExportResult:
        """Composite ``design`` into an RGBA array."""
        start = time.perf_counter()
        loop = asyncio.get_running_loop()

        tasks = [asyncio.ensure_future(self._render_layer(layer)) for layer in design.layers]
        try:
            outcomes = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            raise

        result = ExportResult(design_id=design.id, pixels=np.empty((0, 0, 4), dtype=np.uint8))
        rendered: list[RenderedLayer] = []
        for layer, (rl, error_code) in zip(design.layers, outcomes):
            if rl is not None:
                rendered.append(rl)
                result.rendered.append(layer.id)
            elif error_code is not None:
                result.skipped[layer.id] = error_code

        result.pixels = await loop.run_in_executor(
            self._executor, composite, design.width, design.height, rendered
        )
        result.elapsed_ms = round((time.perf_counter() - start) * 1000, 1)
        logger.info(
            "Design %s: %d/%d layers composited (%d skipped) in %.0fms",
            design.id,
            len(result.rendered),
            len(design.layers),
            len(result.skipped),
            result.elapsed_ms,
        )
        return result

    async def export_png(self, design: Design) -> ExportResult:
        """Composite ``design`` and encode it. Raises EncodeFailure if encoding fails."""
        result = await self.render(design)
        loop = asyncio.get_running_loop()
        result.png = await loop.run_in_executor(self._executor, encode_png, result.pixels)
        return result

    async def _render_layer(self, layer: Layer) -> tuple[RenderedLayer | None, str | None]:
        if not layer.visible:
            return (None, None)
        try:
            if layer.asset is None:
                raise AssetUnavailable(f"Layer {layer.id} has no asset", layer_id=layer.id)
            data = await self.asset_source.fetch(layer.asset)
            loop = asyncio.get_running_loop()
            rl = await loop.run_in_executor(self._executor, self.pipeline.render_bytes, data, layer)
        except LayerRenderError as e:
            logger.warning("Skipping layer %s [%s]: %s", layer.id, e.code, e.message)
            return (None, e.code)
        return (rl, None)

    def close(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)
