"""Horizontal sine waves split over two SVG groups."""
from __future__ import annotations

import math
import random

from ..normalize import format_number
from ..sketch import BooleanParam, NumberParam, ParamValues, RenderContext, Sketch, SvgOutput

SCHEMA = {
    "wave_count": NumberParam("Waves", 9, 2, 30, 1, "Number of horizontal wave lines."),
    "amplitude": NumberParam("Amplitude", 0.35, 0.05, 2, 0.05, "Wave amplitude."),
    "alternate_phase": BooleanParam("Alternate Phase", True, "Offset every other line for contrast."),
}

SAMPLES = 120


def render(params: ParamValues, context: RenderContext) -> SvgOutput:
    rng = random.Random(context.seed)
    count = max(2, int(params["wave_count"]))
    spacing = context.height / (count + 1)

    def wave_path(line: int, tight: bool = False) -> str:
        base_y = spacing * (line + 1)
        phase = math.pi / 3 if params["alternate_phase"] and line % 2 == 1 else 0.0
        jitter = (rng.random() - 0.5) * 0.2
        cycle = 8 if tight else 4
        ripple = 13 if tight else 7
        amp = float(params["amplitude"]) * (0.7 if tight else 1.0)
        parts = []
        for index in range(SAMPLES + 1):
            t = index / SAMPLES
            x = t * context.width
            y = (
                base_y
                + math.sin(t * math.pi * cycle + phase + jitter) * amp
                + math.sin(t * math.pi * ripple) * amp * 0.15
            )
            parts.append(f"{'M' if index == 0 else 'L'}{x:.3f} {y:.3f}")
        return " ".join(parts)

    primary = "\n".join(f'<path d="{wave_path(i)}" />' for i in range(count))
    secondary = "\n".join(f'<path d="{wave_path(i, tight=True)}" />' for i in range(0, count, 2))
    width, height = format_number(context.width), format_number(context.height)
    svg = (
        f'<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 {width} {height}">\n'
        '  <g id="primary" data-layer-name="Primary Waves" fill="none" stroke="#121212" '
        f'stroke-width="0.018">{primary}</g>\n'
        '  <g id="secondary" data-layer-name="Secondary Waves" fill="none" stroke="#121212" '
        f'stroke-width="0.012">{secondary}</g>\n'
        "</svg>"
    )
    return SvgOutput(svg=svg)


SKETCH = Sketch(
    slug="layered-waves",
    title="Layered Waves",
    schema=SCHEMA,
    render_fn=render,
    description="Two passes of wavy lines, one per SVG group.",
)
