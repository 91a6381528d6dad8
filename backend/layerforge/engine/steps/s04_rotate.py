"""S4: rotate.

Clockwise rotation about the buffer centre, with the bounding box expanded
and the exposed corners left fully transparent. Multiples of 360 leave the
buffer untouched.
"""

from __future__ import annotations

from layerforge.engine.context import RenderContext
from layerforge.engine.registry import Stage, step
from layerforge.utils.geometry import normalize_rotation

_TRANSPARENT = (0, 0, 0, 0)


@step(
    id="S4",
    stage=Stage.ROTATE,
    dependencies=["S3"],
    description="Rotate clockwise about the centre, expanding the canvas",
)
def rotate(ctx: RenderContext) -> None:
    ctx.rotation = normalize_rotation(ctx.layer.rotation)
    if ctx.rotation == 0.0:
        return

    # Pillow rotates counter-clockwise for positive angles
    ctx.image = ctx.image.rotate(
        -ctx.rotation,
        resample=ctx.config.rotate_resample,
        expand=True,
        fillcolor=_TRANSPARENT,
    )
