"""Leaf-node geometry helpers. No engine imports."""

from __future__ import annotations

import math

from shapely.geometry import Point, box
from shapely.geometry.base import BaseGeometry

from canvas_intent.engine.tokens import GRID

# Average glyph advance as a fraction of the font size (proportional sans).
_GLYPH_ADVANCE = 0.6


def snap_to_grid(value: float, grid: int = GRID) -> int:
    """Round to the nearest grid multiple, halves rounding up.

    ``snap_to_grid(snap_to_grid(v)) == snap_to_grid(v)`` and the result is
    always an exact multiple of ``grid``.
    """
    return int(math.floor(value / grid + 0.5)) * grid


def snap_up(value: float, grid: int = GRID) -> int:
    """Smallest grid multiple >= value."""
    return int(math.ceil(value / grid)) * grid


def on_grid(value: float, grid: int = GRID) -> bool:
    return float(value) == float(snap_to_grid(value, grid))


def estimate_text_width(text: str, font_size: float, grid: int = GRID) -> int:
    """Rendered width estimate for a single line of text, rounded up to the grid."""
    if not text:
        return grid
    return max(grid, snap_up(len(text) * font_size * _GLYPH_ADVANCE, grid))


def bounds(x: float, y: float, width: float, height: float) -> tuple[float, float, float, float]:
    """(xmin, ymin, xmax, ymax) of a top-left anchored box."""
    return (x, y, x + width, y + height)


def rect(x: float, y: float, width: float, height: float) -> BaseGeometry:
    """Shapely box for a top-left anchored rectangle (degenerate boxes become lines/points)."""
    return box(x, y, x + max(width, 0.0), y + max(height, 0.0))


def covers(outer: BaseGeometry, x: float, y: float, width: float, height: float) -> bool:
    """True when the box lies entirely inside ``outer`` (edges may touch)."""
    if width <= 0 or height <= 0:
        return outer.covers(Point(x, y))
    return outer.covers(rect(x, y, width, height))
