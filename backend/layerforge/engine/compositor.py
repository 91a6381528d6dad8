"""Folds rendered layers onto the canvas with "over" blending.

The canvas is accumulated in premultiplied float64 and converted to 8-bit
straight alpha once, at the end, so the result does not depend on how many
intermediate layers were blended.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import numpy as np
from numpy.typing import NDArray

from layerforge.engine.context import RenderedLayer
from layerforge.utils.geometry import visible_span

logger = logging.getLogger(__name__)


def render_order(layers: Sequence[RenderedLayer]) -> list[RenderedLayer]:
    """Visible layers, bottom first. Ties on z-index keep input order."""
    return [rl for rl in sorted(layers, key=lambda rl: rl.z_index) if rl.visible]


def composite(
    canvas_width: int,
    canvas_height: int,
    layers: Sequence[RenderedLayer],
) -> NDArray[np.uint8]:
    """Blend ``layers`` onto a transparent ``canvas_width x canvas_height`` canvas.

    Returns an H x W x 4 uint8 array with straight (non-premultiplied) alpha.
    """
    canvas = np.zeros((canvas_height, canvas_width, 4), dtype=np.float64)

    for rl in render_order(layers):
        if not blend_over(canvas, rl):
            logger.debug("Layer %s lies outside the canvas", rl.layer_id)

    return unpremultiply(canvas)


def blend_over(canvas: NDArray[np.float64], rl: RenderedLayer) -> bool:
    """Blend one layer onto a premultiplied canvas in place.

    Returns False when no part of the layer falls on the canvas.
    """
    canvas_h, canvas_w = canvas.shape[:2]
    xs = visible_span(rl.origin_x, rl.width, canvas_w)
    ys = visible_span(rl.origin_y, rl.height, canvas_h)
    if xs is None or ys is None or rl.opacity <= 0:
        return False

    x0, x1, sx = xs
    y0, y1, sy = ys
    src = rl.pixels[sy : sy + (y1 - y0), sx : sx + (x1 - x0)].astype(np.float64) / 255.0

    alpha = src[..., 3] * rl.opacity
    inv = 1.0 - alpha
    dst = canvas[y0:y1, x0:x1]
    dst[..., :3] = src[..., :3] * alpha[..., None] + dst[..., :3] * inv[..., None]
    dst[..., 3] = alpha + dst[..., 3] * inv
    return True


def unpremultiply(canvas: NDArray[np.float64]) -> NDArray[np.uint8]:
    """Premultiplied float canvas → straight-alpha uint8."""
    alpha = canvas[..., 3]
    rgb = np.zeros_like(canvas[..., :3])
    np.divide(canvas[..., :3], alpha[..., None], out=rgb, where=alpha[..., None] > 0)

    out = np.empty(canvas.shape, dtype=np.float64)
    out[..., :3] = rgb
    out[..., 3] = alpha
    return np.clip(np.rint(out * 255.0), 0, 255).astype(np.uint8)
