"""Nested rectangular frames with optional crossing diagonals."""
from __future__ import annotations

from typing import List

from ..geometry import Point, Polyline
from ..sketch import (
    BooleanParam,
    GeometryLayer,
    GeometryOutput,
    NumberParam,
    ParamValues,
    RenderContext,
    Sketch,
)

SCHEMA = {
    "inset": NumberParam("Inset", 1, 0, 4, 0.05, "Border inset from edges."),
    "ring_count": NumberParam("Rings", 4, 1, 24, 1, "Number of nested frames."),
    "show_diagonals": BooleanParam("Diagonals", True, "Include crossing diagonals in a second layer."),
}


def rectangle(x: float, y: float, width: float, height: float) -> Polyline:
    return [
        Point(x, y),
        Point(x + width, y),
        Point(x + width, y + height),
        Point(x, y + height),
        Point(x, y),
    ]


def render(params: ParamValues, context: RenderContext) -> GeometryOutput:
    ring_count = max(1, int(params["ring_count"]))
    half = min(context.width, context.height) / 2
    base_inset = max(0.0, min(max(0.0, half - 0.05), float(params["inset"])))
    available = max(0.0, half - base_inset)
    ring_step = available / ring_count if ring_count > 1 else 0.0

    frames: List[Polyline] = []
    for index in range(ring_count):
        inset = base_inset + index * ring_step
        frames.append(
            rectangle(
                inset,
                inset,
                max(0.01, context.width - inset * 2),
                max(0.01, context.height - inset * 2),
            )
        )

    guides: List[Polyline] = []
    if params["show_diagonals"]:
        far_x, far_y = context.width - base_inset, context.height - base_inset
        guides = [
            [Point(base_inset, base_inset), Point(far_x, far_y)],
            [Point(far_x, base_inset), Point(base_inset, far_y)],
        ]

    return GeometryOutput(
        layers=[
            GeometryLayer(id="frame", name="Frame", polylines=frames),
            GeometryLayer(id="guides", name="Guides", polylines=guides),
        ]
    )


SKETCH = Sketch(
    slug="inset-square",
    title="Inset Square",
    schema=SCHEMA,
    render_fn=render,
    description="Concentric frames, a quick calibration plot.",
)
