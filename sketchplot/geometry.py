"""Geometry primitives shared by the normaliser, planner and motion compiler.

Points are immutable named tuples so polylines can be reversed, merged and
copied between layers without any risk of two containers mutating the same
point.  A polyline is just a list of points; containers are always rebuilt
rather than modified in place.
"""
from __future__ import annotations

import math
from typing import Iterable, List, Literal, NamedTuple, Optional, Sequence, Tuple

Unit = Literal["in", "mm"]

MM_PER_INCH = 25.4


class Point(NamedTuple):
    x: float
    y: float


Polyline = List[Point]


# ---------------------------------------------------------------------------
# Measurements
# ---------------------------------------------------------------------------


def distance(a: Point, b: Point) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])


def polyline_length(polyline: Sequence[Point]) -> float:
    total = 0.0
    for a, b in zip(polyline, polyline[1:]):
        total += distance(a, b)
    return total


def bounding_box(polylines: Iterable[Sequence[Point]]) -> Optional[Tuple[Point, Point]]:
    xs: List[float] = []
    ys: List[float] = []
    for polyline in polylines:
        for x, y in polyline:
            xs.append(x)
            ys.append(y)
    if not xs or not ys:
        return None
    return Point(min(xs), min(ys)), Point(max(xs), max(ys))


# ---------------------------------------------------------------------------
# Copies and conversions
# ---------------------------------------------------------------------------


def as_polyline(points: Iterable[Sequence[float]]) -> Polyline:
    """Build a polyline from any iterable of ``(x, y)`` pairs."""
    return [Point(float(p[0]), float(p[1])) for p in points]


def clone_polylines(polylines: Iterable[Sequence[Point]]) -> List[Polyline]:
    return [list(polyline) for polyline in polylines]


def to_inches(value: float, units: Unit) -> float:
    return value if units == "in" else value / MM_PER_INCH


def polyline_to_inches(polyline: Sequence[Point], units: Unit) -> Polyline:
    return [Point(to_inches(p.x, units), to_inches(p.y, units)) for p in polyline]


__all__ = [
    "MM_PER_INCH",
    "Point",
    "Polyline",
    "Unit",
    "as_polyline",
    "bounding_box",
    "clone_polylines",
    "distance",
    "polyline_length",
    "polyline_to_inches",
    "to_inches",
]
