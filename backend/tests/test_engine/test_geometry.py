"""Tests for geometry and imaging helpers."""

from __future__ import annotations

import numpy as np
import pytest

from layerforge.errors import DecodeError
from layerforge.utils.geometry import anchored_origin, clamp_box, normalize_rotation, visible_span
from layerforge.utils.imaging import decode_image, encode_png
from tests.conftest import gradient_image, png_bytes


@pytest.mark.parametrize(
    "degrees, expected",
    [(0, 0.0), (360, 0.0), (-90, 270.0), (450, 90.0), (-720, 0.0), (30.5, 30.5)],
)
def test_normalize_rotation(degrees, expected):
    assert normalize_rotation(degrees) == expected


def test_normalize_rotation_absorbs_float_noise():
    assert normalize_rotation(0.1 + 360 * 7) == normalize_rotation(0.1)


def test_clamp_box_inside():
    assert clamp_box(1, 2, 3, 4, 10, 10) == (1, 2, 4, 6)


def test_clamp_box_partial_overlap():
    assert clamp_box(-2, 6, 5, 10, 8, 8) == (0, 6, 3, 8)


def test_clamp_box_outside():
    assert clamp_box(9, 9, 3, 3, 8, 8) is None


def test_clamp_box_touching_edge_is_empty():
    assert clamp_box(8, 0, 2, 2, 8, 8) is None


def test_clamp_box_non_positive_size():
    assert clamp_box(0, 0, -1, 5, 8, 8) is None


def test_visible_span():
    assert visible_span(-3, 10, 5) == (0, 5, 3)
    assert visible_span(2, 2, 5) == (2, 4, 0)
    assert visible_span(5, 2, 5) is None
    assert visible_span(-4, 4, 5) is None


def test_anchored_origin_rounds():
    assert anchored_origin(30, 30, 20, 40) == (20, 10)
    assert anchored_origin(10.4, 10.6, 5, 5) == (8, 8)


def test_decode_roundtrips_png():
    img = decode_image(png_bytes(gradient_image()))
    assert img.mode == "RGBA"
    assert img.size == (12, 8)


@pytest.mark.parametrize(
    "data",
    [b"", b"not an image at all", png_bytes(gradient_image(64, 64))[:120]],
)
def test_decode_rejects_bad_bytes(data):
    with pytest.raises(DecodeError):
        decode_image(data, label="layer-x")


def test_encode_keeps_alpha():
    pixels = np.zeros((2, 2, 4), dtype=np.uint8)
    pixels[0, 0] = (10, 20, 30, 40)
    decoded = np.array(decode_image(encode_png(pixels)))
    np.testing.assert_array_equal(decoded, pixels)
