"""Sketch plugin interface and registry.

A sketch is a plain capability object: a parameter schema plus a render
function.  Sketches never subclass anything; the registry maps a slug to the
sketch instance so the controller and the HTTP server can look them up.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from .geometry import Polyline, Unit


# ---------------------------------------------------------------------------
# Parameter schema
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class NumberParam:
    label: str
    default: float
    min: float
    max: float
    step: float
    description: Optional[str] = None

    def coerce(self, value: Any) -> float:
        try:
            num = float(value)
        except (TypeError, ValueError):
            num = float(self.default)
        if not math.isfinite(num):
            num = float(self.default)
        clamped = min(self.max, max(self.min, num))
        snapped = math.floor(clamped / self.step + 0.5) * self.step
        return round(snapped, 6)


@dataclass(frozen=True)
class BooleanParam:
    label: str
    default: bool
    description: Optional[str] = None

    def coerce(self, value: Any) -> bool:
        return bool(self.default if value is None else value)


ParamDefinition = Union[NumberParam, BooleanParam]
ParamSchema = Dict[str, ParamDefinition]
ParamValues = Dict[str, Union[float, bool]]


# ---------------------------------------------------------------------------
# Render context and output kinds
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RenderContext:
    width: float = 8.0
    height: float = 6.0
    units: Unit = "in"
    seed: int = 1

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RenderContext":
        units = data.get("units", "in")
        if units not in ("in", "mm"):
            raise ValueError(f"Unsupported units: {units!r}")
        return cls(
            width=float(data.get("width", 8.0)),
            height=float(data.get("height", 6.0)),
            units=units,
            seed=int(data.get("seed", 1)),
        )


@dataclass
class GeometryLayer:
    id: str
    polylines: List[Polyline] = field(default_factory=list)
    name: Optional[str] = None


@dataclass
class GeometryOutput:
    layers: List[GeometryLayer] = field(default_factory=list)


@dataclass
class SvgOutput:
    svg: str


SketchOutput = Union[GeometryOutput, SvgOutput]
RenderFn = Callable[[ParamValues, RenderContext], SketchOutput]


# ---------------------------------------------------------------------------
# Sketch capability
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Sketch:
    slug: str
    title: str
    schema: ParamSchema
    render_fn: RenderFn
    description: str = ""

    def default_params(self) -> ParamValues:
        return {key: definition.default for key, definition in self.schema.items()}

    def coerce_params(self, values: Optional[Mapping[str, Any]] = None) -> ParamValues:
        """Clamp and snap arbitrary input against the schema.

        Keys missing from ``values`` fall back to the schema default; keys not
        in the schema are ignored.
        """
        values = values or {}
        coerced: ParamValues = {}
        for key, definition in self.schema.items():
            coerced[key] = definition.coerce(values.get(key))
        return coerced

    def render(self, params: ParamValues, context: RenderContext) -> SketchOutput:
        return self.render_fn(params, context)

    def describe(self) -> Dict[str, Any]:
        params: Dict[str, Any] = {}
        for key, definition in self.schema.items():
            entry: Dict[str, Any] = {
                "label": definition.label,
                "default": definition.default,
                "description": definition.description,
            }
            if isinstance(definition, NumberParam):
                entry.update(type="number", min=definition.min, max=definition.max, step=definition.step)
            else:
                entry["type"] = "boolean"
            params[key] = entry
        return {
            "slug": self.slug,
            "title": self.title,
            "description": self.description,
            "params": params,
        }


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

_REGISTRY: Dict[str, Sketch] = {}


def register_sketch(sketch: Sketch) -> Sketch:
    if sketch.slug in _REGISTRY:
        raise ValueError(f"Sketch already registered: {sketch.slug}")
    _REGISTRY[sketch.slug] = sketch
    return sketch


def get_sketch(slug: str) -> Sketch:
    try:
        return _REGISTRY[slug]
    except KeyError:
        raise KeyError(f"Unknown sketch: {slug}") from None


def list_sketches() -> List[Sketch]:
    return list(_REGISTRY.values())


__all__ = [
    "BooleanParam",
    "GeometryLayer",
    "GeometryOutput",
    "NumberParam",
    "ParamSchema",
    "ParamValues",
    "RenderContext",
    "Sketch",
    "SketchOutput",
    "SvgOutput",
    "get_sketch",
    "list_sketches",
    "register_sketch",
]
