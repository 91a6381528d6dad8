"""Tests for z-ordered "over" compositing."""

from __future__ import annotations

import numpy as np

from layerforge.engine.compositor import composite, render_order
from layerforge.engine.context import RenderedLayer
from tests.conftest import BLUE, GREEN, RED


def _solid(layer_id, color, size=(10, 10), origin=(0, 0), **kwargs) -> RenderedLayer:
    w, h = size
    pixels = np.empty((h, w, 4), dtype=np.uint8)
    pixels[...] = color
    return RenderedLayer(
        layer_id=layer_id,
        pixels=pixels,
        origin_x=origin[0],
        origin_y=origin[1],
        **kwargs,
    )


def test_empty_canvas_is_transparent():
    out = composite(4, 3, [])
    assert out.shape == (3, 4, 4)
    assert out.dtype == np.uint8
    assert not out.any()


def test_opaque_layer_covers():
    out = composite(10, 10, [_solid("a", RED)])
    assert tuple(out[5, 5]) == RED


def test_z_order_decides_the_top_layer():
    red = _solid("red", RED, z_index=1)
    blue = _solid("blue", BLUE, z_index=2)

    assert tuple(composite(10, 10, [red, blue])[0, 0]) == BLUE
    assert tuple(composite(10, 10, [blue, red])[0, 0]) == BLUE

    swapped = [
        _solid("red", RED, z_index=2),
        _solid("blue", BLUE, z_index=1),
    ]
    assert tuple(composite(10, 10, swapped)[0, 0]) == RED


def test_equal_z_keeps_input_order():
    first = _solid("first", RED, z_index=3)
    second = _solid("second", GREEN, z_index=3)
    assert [rl.layer_id for rl in render_order([first, second])] == ["first", "second"]
    assert tuple(composite(10, 10, [first, second])[0, 0]) == GREEN


def test_invisible_layer_never_drawn():
    hidden = _solid("hidden", BLUE, z_index=5, visible=False)
    out = composite(10, 10, [_solid("base", RED), hidden])
    assert (out[..., 2] == 0).all()
    assert render_order([hidden]) == []


def test_zero_opacity_draws_nothing():
    out = composite(10, 10, [_solid("ghost", BLUE, opacity=0.0)])
    assert not out.any()


def test_half_opacity_over_opaque():
    base = _solid("base", RED, size=(20, 20))
    top = _solid("top", BLUE, size=(10, 10), origin=(5, 5), opacity=0.5, z_index=1)
    out = composite(20, 20, [base, top])

    r, g, b, a = (int(v) for v in out[8, 8])
    assert abs(r - 127.5) <= 1
    assert g == 0
    assert abs(b - 127.5) <= 1
    assert a == 255
    # Outside the top layer the base is untouched
    assert tuple(out[2, 2]) == RED


def test_half_opacity_on_empty_canvas_keeps_colour():
    out = composite(10, 10, [_solid("top", BLUE, opacity=0.5)])
    r, g, b, a = (int(v) for v in out[0, 0])
    assert (r, g, b) == (0, 0, 255)
    assert abs(a - 127.5) <= 1


def test_out_of_canvas_parts_are_clipped():
    layer = _solid("edge", GREEN, size=(10, 10), origin=(-5, 7))
    out = composite(10, 10, [layer])

    assert tuple(out[9, 0]) == GREEN
    assert tuple(out[9, 4]) == GREEN
    assert out[9, 5, 3] == 0
    assert out[6, 0, 3] == 0


def test_fully_outside_layer_is_ignored():
    out = composite(10, 10, [_solid("far", RED, origin=(50, 50))])
    assert not out.any()


def test_source_alpha_multiplies_opacity():
    translucent = _solid("t", (0, 0, 255, 128), opacity=0.5)
    out = composite(10, 10, [_solid("base", (255, 255, 255, 255)), translucent])
    # effective alpha ~0.25 over white
    r, g, b, a = (int(v) for v in out[0, 0])
    assert a == 255
    assert 185 <= r <= 195
    assert b == 255
