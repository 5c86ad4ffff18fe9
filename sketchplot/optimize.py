"""Pen-up travel optimisation for the polylines of one layer.

Greedy nearest-endpoint ordering: starting at the first point of the first
polyline, repeatedly pick the remaining polyline whose start or end is closest
to the pen, reversing it when its end wins, and splice it onto the previous
stroke when the gap is within ``join_tolerance``.
"""
from __future__ import annotations

from typing import List, Sequence

from .geometry import Point, Polyline, distance

DEFAULT_JOIN_TOLERANCE = 0.02


def _nearest(cursor: Point, remaining: Sequence[Polyline]) -> tuple[int, bool]:
    """Index of the nearest polyline and whether it must be reversed.

    Ties keep the first candidate found; a polyline's start is checked before
    its end.
    """
    best_index, best_reverse, best_distance = 0, False, float("inf")
    for index, candidate in enumerate(remaining):
        d_start = distance(cursor, candidate[0])
        if d_start < best_distance:
            best_index, best_reverse, best_distance = index, False, d_start
        d_end = distance(cursor, candidate[-1])
        if d_end < best_distance:
            best_index, best_reverse, best_distance = index, True, d_end
    return best_index, best_reverse


def optimize_polylines(
    polylines: Sequence[Sequence[Point]],
    join_tolerance: float = DEFAULT_JOIN_TOLERANCE,
) -> List[Polyline]:
    """Reorder, reverse and join ``polylines`` to shorten pen-up travel.

    Polylines with fewer than two points are dropped.  The input is left
    untouched; every returned polyline is a new list.
    """
    remaining: List[Polyline] = [list(p) for p in polylines if len(p) >= 2]
    if not remaining:
        return []

    ordered: List[Polyline] = []
    cursor = remaining[0][0]

    while remaining:
        index, reverse = _nearest(cursor, remaining)
        chosen = remaining.pop(index)
        normalized = chosen[::-1] if reverse else chosen

        if ordered and distance(ordered[-1][-1], normalized[0]) <= join_tolerance:
            ordered[-1] = ordered[-1] + normalized[1:]
        else:
            ordered.append(normalized)
        cursor = ordered[-1][-1]

    return ordered


__all__ = ["DEFAULT_JOIN_TOLERANCE", "optimize_polylines"]
