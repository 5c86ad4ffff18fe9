"""Plot job planning.

Turns a :class:`~sketchplot.normalize.NormalizedDocument` into the ordered,
inch-based layers the motion compiler consumes, together with the statistics
shown before a plot starts.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Sequence

from .config import LAYER_MODES, LayerMode, PlotterConfig
from .geometry import Point, Polyline, distance, polyline_length, polyline_to_inches
from .normalize import NormalizedDocument
from .optimize import optimize_polylines

logger = logging.getLogger(__name__)

FLATTENED_LAYER_ID = "flattened"
FLATTENED_LAYER_NAME = "Flattened Layer"


@dataclass(frozen=True)
class PlannedLayer:
    id: str
    name: str
    polylines: List[Polyline] = field(default_factory=list)


@dataclass(frozen=True)
class PlotJobStats:
    layer_count: int = 0
    stroke_count: int = 0
    point_count: int = 0
    draw_distance: float = 0.0
    travel_distance: float = 0.0
    out_of_bounds_points: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class PlotJobPlan:
    mode: LayerMode
    layers: List[PlannedLayer]
    stats: PlotJobStats


def _layer_groups(document: NormalizedDocument, mode: LayerMode) -> List[PlannedLayer]:
    converted = [
        PlannedLayer(
            id=layer.id,
            name=layer.name,
            polylines=[polyline_to_inches(p, document.units) for p in layer.polylines],
        )
        for layer in document.layers
    ]
    if mode != "flatten":
        return converted
    merged: List[Polyline] = [p for layer in converted for p in layer.polylines]
    return [PlannedLayer(id=FLATTENED_LAYER_ID, name=FLATTENED_LAYER_NAME, polylines=merged)]


def _repeat(layer: PlannedLayer, copies: int) -> List[PlannedLayer]:
    if copies == 1:
        return [layer]
    return [
        PlannedLayer(
            id=f"{layer.id}-copy-{n}",
            name=f"{layer.name} ({n}/{copies})",
            polylines=[list(p) for p in layer.polylines],
        )
        for n in range(1, copies + 1)
    ]


def compute_stats(layers: Sequence[PlannedLayer], config: PlotterConfig) -> PlotJobStats:
    """Aggregate counts and distances over the planned layers.

    Travel is measured between consecutive strokes of the same layer only.
    """
    bounds = config.bounds
    strokes = points = out_of_bounds = 0
    draw = travel = 0.0

    for layer in layers:
        cursor: Point | None = None
        for polyline in layer.polylines:
            if len(polyline) < 2:
                continue
            strokes += 1
            points += len(polyline)
            draw += polyline_length(polyline)
            if cursor is not None:
                travel += distance(cursor, polyline[0])
            cursor = polyline[-1]
            out_of_bounds += sum(1 for x, y in polyline if not bounds.contains(x, y))

    return PlotJobStats(
        layer_count=len(layers),
        stroke_count=strokes,
        point_count=points,
        draw_distance=draw,
        travel_distance=travel,
        out_of_bounds_points=out_of_bounds,
    )


def create_plot_job_plan(
    document: NormalizedDocument,
    mode: LayerMode,
    config: PlotterConfig,
) -> PlotJobPlan:
    """Optimise and expand the document's layers for plotting."""
    if mode not in LAYER_MODES:
        raise ValueError(f"Unknown layer mode: {mode!r}")

    copies = config.copies
    planned: List[PlannedLayer] = []
    for group in _layer_groups(document, mode):
        optimized = PlannedLayer(group.id, group.name, optimize_polylines(group.polylines))
        planned.extend(_repeat(optimized, copies))

    stats = compute_stats(planned, config)
    logger.debug(
        "Planned %d layer(s), %d stroke(s), draw %.2f in, travel %.2f in, %d point(s) out of bounds (%s)",
        stats.layer_count,
        stats.stroke_count,
        stats.draw_distance,
        stats.travel_distance,
        stats.out_of_bounds_points,
        config.model,
    )
    return PlotJobPlan(mode=mode, layers=planned, stats=stats)


__all__ = [
    "FLATTENED_LAYER_ID",
    "FLATTENED_LAYER_NAME",
    "PlannedLayer",
    "PlotJobPlan",
    "PlotJobStats",
    "compute_stats",
    "create_plot_job_plan",
]
