"""High level orchestration for the SketchPlot server and scripts."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from .config import LAYER_MODES, LayerMode, PlotterConfig
from .ebb import EbbPacket, build_ebb_packets, estimate_duration_ms
from .geometry import bounding_box
from .normalize import NormalizedDocument, normalize_output, render_document_svg
from .planner import PlotJobPlan, create_plot_job_plan
from .sketch import ParamValues, RenderContext, get_sketch
from .transport import StatusCallback, TransportSession

logger = logging.getLogger(__name__)


@dataclass
class RenderResult:
    slug: str
    params: ParamValues
    context: RenderContext
    document: Optional[NormalizedDocument] = None
    plan: Optional[PlotJobPlan] = None
    render_error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.render_error is None


@dataclass
class SketchPlotController:
    """Coordinate sketch rendering, plot planning and the plotter session."""

    session: TransportSession = field(default_factory=TransportSession)
    plotter_config: PlotterConfig = field(default_factory=PlotterConfig)
    layer_mode: LayerMode = "ordered"
    context: RenderContext = field(default_factory=RenderContext)

    def __post_init__(self) -> None:
        self.last_render: Optional[RenderResult] = None
        self.plan: Optional[PlotJobPlan] = None
        self._plot_task: Optional[asyncio.Task] = None

    # ------------------------------------------------------------------
    # Rendering and planning
    # ------------------------------------------------------------------
    @property
    def document(self) -> Optional[NormalizedDocument]:
        return self.last_render.document if self.last_render else None

    def render(
        self,
        slug: Optional[str] = None,
        params: Optional[Mapping[str, Any]] = None,
        context: Optional[RenderContext] = None,
    ) -> RenderResult:
        """Render a sketch and plan it with the current mode and config.

        Unknown slugs raise :class:`KeyError`; a failing sketch is reported in
        :attr:`RenderResult.render_error` instead of raising.
        """
        if slug is None:
            if self.last_render is None:
                raise ValueError("No sketch selected")
            slug = self.last_render.slug
        sketch = get_sketch(slug)
        if context is not None:
            self.context = context
        coerced = sketch.coerce_params(params)

        result = RenderResult(slug=slug, params=coerced, context=self.context)
        try:
            output = sketch.render(coerced, self.context)
        except Exception as exc:
            logger.warning("Sketch %s failed to render: %s", slug, exc)
            result.render_error = str(exc) or "Render failed"
        else:
            result.document = normalize_output(output, self.context)
            result.plan = create_plot_job_plan(result.document, self.layer_mode, self.plotter_config)

        self.last_render = result
        self.plan = result.plan
        return result

    def _replan(self) -> Optional[PlotJobPlan]:
        document = self.document
        self.plan = None if document is None else create_plot_job_plan(document, self.layer_mode, self.plotter_config)
        if self.last_render is not None:
            self.last_render.plan = self.plan
        return self.plan

    def set_layer_mode(self, mode: str) -> Optional[PlotJobPlan]:
        if mode not in LAYER_MODES:
            raise ValueError(f"Unknown layer mode: {mode!r}")
        self.layer_mode = mode  # type: ignore[assignment]
        return self._replan()

    def set_plotter_config(self, changes: Mapping[str, Any]) -> Optional[PlotJobPlan]:
        self.plotter_config = PlotterConfig.from_dict(changes, base=self.plotter_config)
        return self._replan()

    def packets(self) -> List[EbbPacket]:
        if self.plan is None:
            return []
        return build_ebb_packets(self.plan, self.plotter_config)

    def preview_svg(self, hovered_layer_id: Optional[str] = None) -> Optional[str]:
        document = self.document
        if document is None:
            return None
        return render_document_svg(document, hovered_layer_id=hovered_layer_id)

    # ------------------------------------------------------------------
    # Plotter session
    # ------------------------------------------------------------------
    @property
    def is_plotting(self) -> bool:
        return self._plot_task is not None and not self._plot_task.done()

    async def connect(self, on_status: Optional[StatusCallback] = None) -> None:
        await self.session.connect(on_status)

    async def disconnect(self, on_status: Optional[StatusCallback] = None) -> None:
        await self.session.disconnect(on_status)

    async def start_plot(self, on_status: Optional[StatusCallback] = None) -> asyncio.Task:
        """Stream the current plan in a background task."""
        if self.is_plotting:
            raise RuntimeError("A plot is already running")
        if not self.session.is_connected():
            raise RuntimeError("Plotter is not connected")
        if self.plan is None or self.plan.stats.stroke_count == 0:
            raise RuntimeError("Nothing to plot")
        packets = self.packets()

        logger.info("Starting plot: %d packets", len(packets))
        self._plot_task = asyncio.create_task(self.session.send(packets, on_status))
        return self._plot_task

    def pause(self, on_status: Optional[StatusCallback] = None) -> None:
        self.session.pause(on_status)

    def resume(self, on_status: Optional[StatusCallback] = None) -> None:
        self.session.resume(on_status)

    async def cancel(self, on_status: Optional[StatusCallback] = None) -> None:
        await self.session.cancel(on_status)

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------
    def summary(self) -> Dict[str, Any]:
        render = self.last_render
        document = self.document
        bbox = None
        if document is not None:
            box = bounding_box(p for layer in document.layers for p in layer.polylines)
            if box is not None:
                bbox = [list(box[0]), list(box[1])]
        packets = self.packets()
        return {
            "sketch": render.slug if render else None,
            "params": dict(render.params) if render else None,
            "render_error": render.render_error if render else None,
            "layer_mode": self.layer_mode,
            "plotter_config": self.plotter_config.to_dict(),
            "layers": [{"id": l.id, "name": l.name} for l in document.layers] if document else [],
            "bounding_box": bbox,
            "stats": self.plan.stats.to_dict() if self.plan else None,
            "packet_count": len(packets),
            "estimated_duration_ms": estimate_duration_ms(packets),
            "status": self.session.status.to_dict(),
        }


__all__ = ["RenderResult", "SketchPlotController"]
