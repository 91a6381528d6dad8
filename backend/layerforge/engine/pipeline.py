"""Pipeline orchestrator — runs the render steps for one layer in dependency order."""

from __future__ import annotations

import logging
import time

from PIL import Image

import layerforge.engine.steps  # noqa: F401  (registers S1-S4)
from layerforge.engine.config import PipelineConfig
from layerforge.engine.context import RenderContext, RenderedLayer
from layerforge.engine.design import Layer
from layerforge.engine.registry import StepRegistry, StepSpec, get_registry
from layerforge.errors import LayerRenderError
from layerforge.utils.geometry import anchored_origin
from layerforge.utils.imaging import decode_image, to_pixels

logger = logging.getLogger(__name__)


class Pipeline:
    """Turns a decoded source image plus a Layer into a positioned RGBA buffer.

    Stateless between calls; one instance is shared by all render workers.
    """

    def __init__(
        self,
        registry: StepRegistry | None = None,
        config: PipelineConfig | None = None,
    ) -> None:
        self.registry = registry or get_registry()
        self.config = config or PipelineConfig()
        self._ordered: list[StepSpec] | None = None

    @property
    def steps(self) -> list[StepSpec]:
        if self._ordered is None:
            self._ordered = self.registry.resolve_order()
        return self._ordered

    def render(self, source: Image.Image, layer: Layer) -> RenderedLayer:
        """Run every step on ``source`` and anchor the result at the layer centre.

        Raises a LayerRenderError subclass when the layer cannot be rendered.
        """
        start = time.perf_counter()

        image = source if source.mode == "RGBA" else source.convert("RGBA")
        ctx = RenderContext(
            layer=layer,
            image=image,
            config=self.config,
            source_size=image.size,
        )

        for spec in self.steps:
            try:
                spec.fn(ctx)
            except LayerRenderError as e:
                e.details.setdefault("step", spec.id)
                e.details["completed_steps"] = list(ctx.completed_steps)
                raise
            except Exception as e:
                raise LayerRenderError(
                    f"Step {spec.id} failed for layer {layer.id}: {e}",
                    layer_id=layer.id,
                    step=spec.id,
                    completed_steps=list(ctx.completed_steps),
                ) from e
            ctx.completed_steps.append(spec.id)

        rendered = self._finish(ctx)
        logger.debug(
            "Layer %s rendered %dx%d at (%d, %d) via %s (crop %s) in %.1fms",
            layer.id,
            rendered.width,
            rendered.height,
            rendered.origin_x,
            rendered.origin_y,
            "->".join(ctx.completed_steps),
            ctx.crop_box,
            (time.perf_counter() - start) * 1000,
        )
        return rendered

    def render_bytes(self, data: bytes, layer: Layer) -> RenderedLayer:
        """Decode ``data`` and render it. Raises DecodeError on bad bytes."""
        return self.render(decode_image(data, label=layer.id), layer)

    def _finish(self, ctx: RenderContext) -> RenderedLayer:
        layer = ctx.layer
        pixels = to_pixels(ctx.image)
        height, width = pixels.shape[:2]
        center_x, center_y = layer.center
        origin_x, origin_y = anchored_origin(center_x, center_y, width, height)
        return RenderedLayer(
            layer_id=layer.id,
            pixels=pixels,
            origin_x=origin_x,
            origin_y=origin_y,
            opacity=layer.opacity,
            z_index=layer.z_index,
            visible=layer.visible,
        )


def create_pipeline(config: PipelineConfig | None = None) -> Pipeline:
    """Factory function for creating a pipeline instance."""
    return Pipeline(config=config)
