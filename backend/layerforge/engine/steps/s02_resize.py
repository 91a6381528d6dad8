"""S2: resize.

Scale to exactly (width, height). Aspect ratio is not preserved.
"""

from __future__ import annotations

from layerforge.engine.context import RenderContext
from layerforge.engine.registry import Stage, step


@step(
    id="S2",
    stage=Stage.RESIZE,
    dependencies=["S1"],
    description="Scale the cropped image to the layer size",
)
def resize(ctx: RenderContext) -> None:
    ctx.image = ctx.image.resize(ctx.target_size, resample=ctx.config.resize_resample)
