"""Leaf-node geometry helpers. No engine imports."""

from __future__ import annotations

import math

from shapely.geometry import box

# Decimal places kept after reducing an angle mod 360. Absorbs the float
# noise of r + 360k so both reduce to the same value.
_ANGLE_PRECISION = 9


def normalize_rotation(degrees: float) -> float:
    """Reduce an angle to [0, 360)."""
    angle = math.fmod(degrees, 360.0)
    if angle < 0:
        angle += 360.0
    angle = round(angle, _ANGLE_PRECISION)
    if angle >= 360.0:
        return 0.0
    return angle


def clamp_box(
    x: float,
    y: float,
    width: float,
    height: float,
    bound_width: int,
    bound_height: int,
) -> tuple[int, int, int, int] | None:
    """Round a rectangle to whole pixels and clip it to ``(0, 0, bound_width, bound_height)``.

    Returns (left, top, right, bottom), or None when nothing of it is left.
    """
    if width <= 0 or height <= 0:
        return None
    left = int(round(x))
    top = int(round(y))
    requested = box(left, top, left + int(round(width)), top + int(round(height)))
    clipped = requested.intersection(box(0, 0, bound_width, bound_height))
    if clipped.is_empty or clipped.area <= 0:
        return None
    minx, miny, maxx, maxy = clipped.bounds
    return (int(minx), int(miny), int(maxx), int(maxy))


def visible_span(origin: int, length: int, limit: int) -> tuple[int, int, int] | None:
    """1-D clip of ``[origin, origin + length)`` against ``[0, limit)``.

    Returns (dest_start, dest_end, src_start), or None if nothing overlaps.
    """
    start = max(0, origin)
    end = min(limit, origin + length)
    if end <= start:
        return None
    return (start, end, start - origin)


def anchored_origin(
    center_x: float,
    center_y: float,
    width: int,
    height: int,
) -> tuple[int, int]:
    """Top-left pixel of a ``width x height`` buffer centred on (center_x, center_y)."""
    return (int(round(center_x - width / 2)), int(round(center_y - height / 2)))
