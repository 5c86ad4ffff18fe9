"""Top-level package for the SketchPlot toolkit.

This package turns parametric sketches into layered line art, plans the pen
path for an EiBotBoard plotter and streams the resulting commands over a
serial link.
"""

from .config import DEFAULT_PLOTTER_CONFIG, MODEL_BOUNDS, PlotterConfig, SerialSettings
from .controller import SketchPlotController
from .ebb import CommandPacket, PauseMarker, build_ebb_packets
from .geometry import Point, Polyline
from .normalize import NormalizedDocument, NormalizedLayer, normalize_output, render_document_svg
from .optimize import optimize_polylines
from .planner import PlotJobPlan, create_plot_job_plan
from .transport import PlotterStatus, TransportSession

__all__ = [
    "CommandPacket",
    "DEFAULT_PLOTTER_CONFIG",
    "MODEL_BOUNDS",
    "NormalizedDocument",
    "NormalizedLayer",
    "PauseMarker",
    "PlotJobPlan",
    "PlotterConfig",
    "PlotterStatus",
    "Point",
    "Polyline",
    "SerialSettings",
    "SketchPlotController",
    "TransportSession",
    "build_ebb_packets",
    "create_plot_job_plan",
    "normalize_output",
    "optimize_polylines",
    "render_document_svg",
]
