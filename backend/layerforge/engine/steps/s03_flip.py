"""S3: flip. Mirror the resized buffer; applying a flip twice is the identity."""

from __future__ import annotations

from PIL import Image

from layerforge.engine.context import RenderContext
from layerforge.engine.registry import Stage, step


@step(
    id="S3",
    stage=Stage.FLIP,
    dependencies=["S2"],
    description="Mirror horizontally (flipX) and/or vertically (flipY)",
)
def flip(ctx: RenderContext) -> None:
    if ctx.layer.flip_x:
        ctx.image = ctx.image.transpose(Image.Transpose.FLIP_LEFT_RIGHT)
    if ctx.layer.flip_y:
        ctx.image = ctx.image.transpose(Image.Transpose.FLIP_TOP_BOTTOM)
