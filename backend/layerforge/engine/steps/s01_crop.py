"""S1: crop.

Extract the crop rectangle, given in source pixels, before any coordinate
change. Out-of-bounds rectangles are clamped; nothing left after clamping is
an InvalidCrop.
"""

from __future__ import annotations

from layerforge.engine.context import RenderContext
from layerforge.engine.registry import Stage, step
from layerforge.errors import InvalidCrop
from layerforge.utils.geometry import clamp_box


@step(
    id="S1",
    stage=Stage.CROP,
    description="Extract the crop rectangle from the decoded source",
)
def crop(ctx: RenderContext) -> None:
    rect = ctx.layer.crop
    if rect is None:
        return

    src_w, src_h = ctx.source_size
    clamped = clamp_box(rect.x, rect.y, rect.width, rect.height, src_w, src_h)
    if clamped is None:
        raise InvalidCrop(
            f"Crop ({rect.x}, {rect.y}, {rect.width}, {rect.height}) is empty "
            f"on a {src_w}x{src_h} source",
            layer_id=ctx.layer.id,
        )

    ctx.crop_box = clamped
    ctx.image = ctx.image.crop(clamped)
