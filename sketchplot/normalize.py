"""Normalise sketch output into named polyline layers.

A sketch returns either structured geometry (layers of polylines) or a
freeform SVG string.  Both are converted into a :class:`NormalizedDocument`:
the document size and units come from the render context, and every layer
carries its polylines together with an SVG fragment used for previews.
"""
from __future__ import annotations

import copy
import logging
import math
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence

from svgpathtools import parse_path

from .geometry import Point, Polyline, Unit, clone_polylines, polyline_length
from .sketch import GeometryLayer, GeometryOutput, RenderContext, SketchOutput, SvgOutput

logger = logging.getLogger(__name__)

SVG_NS = "http://www.w3.org/2000/svg"
INKSCAPE_NS = "http://www.inkscape.org/namespaces/inkscape"
_SVG_TAG_PREFIX = f"{{{SVG_NS}}}"

STROKE_STYLE = (
    'fill="none" stroke="currentColor" stroke-width="0.012" '
    'stroke-linecap="round" stroke-linejoin="round"'
)
ELLIPSE_SEGMENTS = 48
PATH_MIN_STEPS = 8
PATH_MAX_STEPS = 300

_UNIT_SUFFIX = re.compile(r"[a-zA-Z%]+")
_LEADING_FLOAT = re.compile(r"^\s*[-+]?(?:\d+\.?\d*|\.\d+)")
_POINT_SEPARATOR = re.compile(r"[\s,]+")


# ---------------------------------------------------------------------------
# Document model
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class NormalizedLayer:
    id: str
    name: str
    polylines: List[Polyline] = field(default_factory=list)
    svg_markup: str = ""

    @classmethod
    def from_polylines(cls, id: str, name: str, polylines: Sequence[Polyline]) -> "NormalizedLayer":
        """Build a layer whose preview markup is generated from ``polylines``."""
        kept = [list(p) for p in polylines if len(p) >= 2]
        return cls(id=id, name=name, polylines=kept, svg_markup=polylines_markup(kept))


@dataclass(frozen=True)
class NormalizedDocument:
    width: float
    height: float
    units: Unit
    layers: List[NormalizedLayer] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def format_number(value: float) -> str:
    """Shortest text for ``value``; integral floats drop their ``.0``."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return repr(value) if isinstance(value, float) else str(value)


def escape_attr(value: str) -> str:
    return (
        value.replace("&", "&amp;")
        .replace('"', "&quot;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
    )


def points_to_path(polyline: Sequence[Point]) -> str:
    if not polyline:
        return ""
    first, rest = polyline[0], polyline[1:]
    commands = [f"M {format_number(first.x)} {format_number(first.y)}"]
    for point in rest:
        commands.append(f"L {format_number(point.x)} {format_number(point.y)}")
    return " ".join(commands)


def polylines_markup(polylines: Sequence[Polyline]) -> str:
    return "\n".join(f'<path d="{points_to_path(p)}" {STROKE_STYLE} />' for p in polylines)


# ---------------------------------------------------------------------------
# Geometry output
# ---------------------------------------------------------------------------


def _normalize_geometry_layer(layer: GeometryLayer, index: int) -> NormalizedLayer:
    name = (layer.name or "").strip() or f"Layer {index + 1}"
    polylines = [[Point(float(x), float(y)) for x, y in p] for p in layer.polylines]
    return NormalizedLayer.from_polylines(layer.id, name, polylines)


# ---------------------------------------------------------------------------
# SVG output
# ---------------------------------------------------------------------------


def _local_name(tag: Any) -> str:
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1] if "}" in tag else tag


def _float_attr(element: ET.Element, name: str, fallback: float = 0.0) -> float:
    raw = element.get(name)
    if not raw:
        return fallback
    match = _LEADING_FLOAT.match(_UNIT_SUFFIX.sub("", raw))
    if not match:
        return fallback
    value = float(match.group(0))
    return value if math.isfinite(value) else fallback


def parse_points(points: str) -> Polyline:
    tokens = [t for t in _POINT_SEPARATOR.split(points.strip()) if t]
    values: List[float] = []
    for token in tokens:
        try:
            values.append(float(token))
        except ValueError:
            continue
    pairs = zip(values[0::2], values[1::2])
    return [Point(x, y) for x, y in pairs if math.isfinite(x) and math.isfinite(y)]


def sample_path(path_data: str) -> Polyline:
    """Sample SVG path data at equal arc-length intervals.

    Malformed or degenerate data yields an empty polyline.
    """
    if not path_data.strip():
        return []
    try:
        path = parse_path(path_data)
        length = float(path.length())
        if not math.isfinite(length) or length <= 0:
            return []
        steps = max(PATH_MIN_STEPS, min(PATH_MAX_STEPS, math.ceil(length / 2)))
        sampled: Polyline = []
        for index in range(steps + 1):
            at = min(length, length * index / steps)
            point = path.point(path.ilength(at))
            sampled.append(Point(float(point.real), float(point.imag)))
        return sampled
    except Exception as exc:
        logger.debug("Skipping unreadable path data %r: %s", path_data[:40], exc)
        return []


def sample_ellipse(cx: float, cy: float, rx: float, ry: float) -> Polyline:
    points: Polyline = []
    for index in range(ELLIPSE_SEGMENTS + 1):
        theta = math.pi * 2 * index / ELLIPSE_SEGMENTS
        points.append(Point(cx + math.cos(theta) * rx, cy + math.sin(theta) * ry))
    return points


def _element_polylines(element: ET.Element) -> List[Polyline]:
    tag = _local_name(element.tag)
    if tag == "path":
        sampled = sample_path(element.get("d", ""))
        return [sampled] if len(sampled) >= 2 else []
    if tag == "line":
        return [[
            Point(_float_attr(element, "x1"), _float_attr(element, "y1")),
            Point(_float_attr(element, "x2"), _float_attr(element, "y2")),
        ]]
    if tag in ("polyline", "polygon"):
        polyline = parse_points(element.get("points", ""))
        if len(polyline) < 2:
            return []
        if tag == "polygon" and polyline[0] != polyline[-1]:
            polyline.append(polyline[0])
        return [polyline]
    if tag == "rect":
        x, y = _float_attr(element, "x"), _float_attr(element, "y")
        width, height = _float_attr(element, "width"), _float_attr(element, "height")
        if width <= 0 or height <= 0:
            return []
        return [[
            Point(x, y),
            Point(x + width, y),
            Point(x + width, y + height),
            Point(x, y + height),
            Point(x, y),
        ]]
    if tag == "circle":
        r = _float_attr(element, "r")
        if r <= 0:
            return []
        return [sample_ellipse(_float_attr(element, "cx"), _float_attr(element, "cy"), r, r)]
    if tag == "ellipse":
        rx, ry = _float_attr(element, "rx"), _float_attr(element, "ry")
        if rx <= 0 or ry <= 0:
            return []
        return [sample_ellipse(_float_attr(element, "cx"), _float_attr(element, "cy"), rx, ry)]
    return []


def collect_polylines(element: ET.Element) -> List[Polyline]:
    """Polylines of ``element`` and all of its descendants, in document order."""
    polylines = _element_polylines(element)
    for child in element:
        polylines.extend(collect_polylines(child))
    return polylines


def _serialize(element: ET.Element) -> str:
    """Serialise a layer group as a fragment for embedding in an SVG root.

    SVG tags are written unqualified so the fragment inherits the default
    namespace of the document it is placed in; the global ElementTree prefix
    registry is left alone.
    """
    detached = copy.deepcopy(element)
    detached.tail = None
    for node in detached.iter():
        if isinstance(node.tag, str) and node.tag.startswith(_SVG_TAG_PREFIX):
            node.tag = node.tag[len(_SVG_TAG_PREFIX):]
    return ET.tostring(detached, encoding="unicode")


def _synthetic_group(root: ET.Element) -> ET.Element:
    ns = root.tag[1:].split("}", 1)[0] if isinstance(root.tag, str) and root.tag.startswith("{") else None
    group = ET.Element(f"{{{ns}}}g" if ns else "g")
    group.text = root.text
    group.extend(list(root))
    return group


def _layer_name(element: ET.Element, index: int) -> str:
    for key in ("data-layer-name", f"{{{INKSCAPE_NS}}}label", "id", "data-name"):
        value = element.get(key)
        if value is not None:
            return value
    return f"Layer {index + 1}"


def _normalize_svg(svg: str) -> List[NormalizedLayer]:
    try:
        root = ET.fromstring(svg)
    except ET.ParseError as exc:
        raise ValueError(f"Invalid SVG document: {exc}") from exc

    groups = [child for child in root if _local_name(child.tag) == "g"]
    nodes = groups if len(groups) > 1 else [_synthetic_group(root)]

    layers: List[NormalizedLayer] = []
    for index, node in enumerate(nodes):
        layers.append(
            NormalizedLayer(
                id=node.get("id") or f"svg-layer-{index + 1}",
                name=_layer_name(node, index),
                polylines=collect_polylines(node),
                svg_markup=_serialize(node),
            )
        )
    return layers


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def normalize_output(output: SketchOutput, context: RenderContext) -> NormalizedDocument:
    """Convert raw sketch output into a :class:`NormalizedDocument`."""
    if isinstance(output, GeometryOutput):
        layers = [_normalize_geometry_layer(layer, i) for i, layer in enumerate(output.layers)]
    elif isinstance(output, SvgOutput):
        layers = _normalize_svg(output.svg)
    else:
        raise TypeError(f"Unsupported sketch output: {type(output)!r}")

    logger.debug(
        "Normalised %s output into %d layer(s)", type(output).__name__, len(layers)
    )
    return NormalizedDocument(
        width=context.width,
        height=context.height,
        units=context.units,
        layers=layers,
    )


def render_document_svg(
    document: NormalizedDocument,
    *,
    hovered_layer_id: Optional[str] = None,
    dim_opacity: float = 0.15,
    background: str = "#fcf7ef",
) -> str:
    """Compose the layer fragments into a standalone SVG document."""
    groups = []
    for layer in document.layers:
        dimmed = hovered_layer_id is not None and hovered_layer_id != layer.id
        opacity = dim_opacity if dimmed else 1
        groups.append(
            f'<g data-layer-id="{escape_attr(layer.id)}" '
            f'data-layer-name="{escape_attr(layer.name)}" '
            f'opacity="{format_number(opacity)}">{layer.svg_markup}</g>'
        )

    width = format_number(document.width)
    height = format_number(document.height)
    body = "\n".join(groups)
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        f'<svg xmlns="{SVG_NS}" width="{width}" height="{height}" viewBox="0 0 {width} {height}">\n'
        f'  <rect x="0" y="0" width="{width}" height="{height}" fill="{escape_attr(background)}" />\n'
        '  <g stroke="#1a1a1a" fill="none">\n'
        f"    {body}\n"
        "  </g>\n"
        "</svg>"
    )


__all__ = [
    "NormalizedDocument",
    "NormalizedLayer",
    "clone_polylines",
    "collect_polylines",
    "escape_attr",
    "normalize_output",
    "parse_points",
    "polyline_length",
    "render_document_svg",
    "sample_ellipse",
    "sample_path",
]
