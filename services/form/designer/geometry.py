"""Coordinate math for placing and resizing fields on the designer canvas."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

RESIZE_THRESHOLD = 8
MIN_WIDTH = 50
MIN_HEIGHT = 20
GRID_SIZE = 10

NORTH_WEST = "nw"
NORTH_EAST = "ne"
SOUTH_WEST = "sw"
SOUTH_EAST = "se"
NORTH = "n"
SOUTH = "s"
WEST = "w"
EAST = "e"

HANDLES = (NORTH_WEST, NORTH_EAST, SOUTH_WEST, SOUTH_EAST, NORTH, SOUTH, WEST, EAST)

_CURSORS = {
    NORTH_WEST: "nw-resize",
    SOUTH_EAST: "nw-resize",
    NORTH_EAST: "ne-resize",
    SOUTH_WEST: "ne-resize",
    NORTH: "ns-resize",
    SOUTH: "ns-resize",
    EAST: "ew-resize",
    WEST: "ew-resize",
}
DEFAULT_CURSOR = "grab"


@dataclass(frozen=True)
class Box:
    """Position and size of a field in canvas pixels."""

    left: float
    top: float
    width: float
    height: float


def snap(value: float, enabled: bool = True, grid: int = GRID_SIZE) -> float:
    """Round ``value`` to the nearest grid line, halves rounding upwards."""

    if not enabled:
        return value
    return math.floor(value / grid + 0.5) * grid


def hit_test(
    local_x: float,
    local_y: float,
    width: float,
    height: float,
    threshold: float = RESIZE_THRESHOLD,
) -> Optional[str]:
    """Return the resize handle under a point given relative to a field's corner."""

    near_left = local_x <= threshold
    near_right = local_x >= width - threshold
    near_top = local_y <= threshold
    near_bottom = local_y >= height - threshold

    if near_top and near_left:
        return NORTH_WEST
    if near_top and near_right:
        return NORTH_EAST
    if near_bottom and near_left:
        return SOUTH_WEST
    if near_bottom and near_right:
        return SOUTH_EAST

    if near_top:
        return NORTH
    if near_bottom:
        return SOUTH
    if near_left:
        return WEST
    if near_right:
        return EAST
    return None


def cursor_for(handle: Optional[str]) -> str:
    return _CURSORS.get(handle or "", DEFAULT_CURSOR)


def resize(handle: str, start: Box, dx: float, dy: float) -> Box:
    """Apply a pointer delta to ``start`` as if dragging ``handle``.

    Width and height never drop below ``MIN_WIDTH`` / ``MIN_HEIGHT``. West
    and north handles keep the opposite edge fixed by shifting the origin.
    """

    if handle not in HANDLES:
        raise ValueError(f"Unknown resize handle: {handle!r}")

    width = start.width
    height = start.height
    left = start.left
    top = start.top

    if handle in (EAST, NORTH_EAST, SOUTH_EAST):
        width = max(MIN_WIDTH, start.width + dx)
    elif handle in (WEST, NORTH_WEST, SOUTH_WEST):
        width = max(MIN_WIDTH, start.width - dx)
        left = start.left + (start.width - width)

    if handle in (SOUTH, SOUTH_EAST, SOUTH_WEST):
        height = max(MIN_HEIGHT, start.height + dy)
    elif handle in (NORTH, NORTH_EAST, NORTH_WEST):
        height = max(MIN_HEIGHT, start.height - dy)
        top = start.top + (start.height - height)

    return Box(left=left, top=top, width=width, height=height)


def clamp_position(
    left: float,
    top: float,
    width: float,
    height: float,
    canvas_width: float,
    canvas_height: float,
) -> tuple[float, float]:
    """Keep a box of the given size inside the canvas.

    A box larger than the canvas is pinned to the canvas origin.
    """

    bounded_left = max(0, min(left, canvas_width - width))
    bounded_top = max(0, min(top, canvas_height - height))
    return bounded_left, bounded_top
