"""Guide lines and snapping for interactive placement.

Pure functions: no I/O, no state, linear in the number of sibling layers.
Runs on every pointer move, before any rendering happens.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from layerforge.engine.design import Layer, LayerRef

DEFAULT_SNAP_TOLERANCE = 6.0


@dataclass(frozen=True)
class GuideLines:
    vertical: tuple[float, ...] = ()  # x positions
    horizontal: tuple[float, ...] = ()  # y positions


def compute_guides(
    canvas_width: float,
    canvas_height: float,
    siblings: Iterable[Layer],
    excluded: LayerRef | None = None,
) -> GuideLines:
    """Canvas centre lines plus edges and centres of every other layer.

    Lines keep first-occurrence order with duplicates dropped; ``snap`` takes
    the first qualifying line, so the order is observable.
    """
    vertical: dict[float, None] = {canvas_width / 2: None}
    horizontal: dict[float, None] = {canvas_height / 2: None}

    for layer in siblings:
        if excluded is not None and layer.ref == excluded:
            continue
        vertical[layer.x] = None
        vertical[layer.x + layer.width] = None
        vertical[layer.x + layer.width / 2] = None
        horizontal[layer.y] = None
        horizontal[layer.y + layer.height] = None
        horizontal[layer.y + layer.height / 2] = None

    return GuideLines(vertical=tuple(vertical), horizontal=tuple(horizontal))


def find_line(
    candidate: float,
    lines: Sequence[float],
    tolerance: float = DEFAULT_SNAP_TOLERANCE,
) -> float | None:
    """First line within ``tolerance`` of ``candidate``, or None."""
    for line in lines:
        if abs(candidate - line) <= tolerance:
            return line
    return None


def snap(
    candidate: float,
    lines: Sequence[float],
    tolerance: float = DEFAULT_SNAP_TOLERANCE,
) -> float:
    """First line within ``tolerance`` of ``candidate``, else ``candidate``."""
    line = find_line(candidate, lines, tolerance)
    return candidate if line is None else line


def snap_position(
    x: float,
    y: float,
    width: float,
    height: float,
    guides: GuideLines,
    tolerance: float = DEFAULT_SNAP_TOLERANCE,
) -> tuple[float, float]:
    """Snap the centre of a ``width x height`` box at (x, y); return the new top-left."""
    return (
        snap_axis(x, width, guides.vertical, tolerance),
        snap_axis(y, height, guides.horizontal, tolerance),
    )


def snap_axis(
    corner: float,
    size: float,
    lines: Sequence[float],
    tolerance: float = DEFAULT_SNAP_TOLERANCE,
) -> float:
    """Single-axis form of ``snap_position`` for moves that change only x or only y."""
    return snap(corner + size / 2, lines, tolerance) - size / 2
