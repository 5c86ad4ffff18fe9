"""FastAPI application exposing rendering, planning and plotter control."""
from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

from fastapi import FastAPI, Header, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response

from .. import sketches  # noqa: F401  registers the built-in sketches
from ..config import SerialSettings
from ..controller import SketchPlotController
from ..device import EBBSerialBackend, MockBackend
from ..ebb import CommandPacket
from ..sketch import RenderContext, list_sketches
from ..support import supports_direct_plotting, supports_serial
from ..transport import TransportSession
from .models import PlanRequest, RenderRequest

logger = logging.getLogger(__name__)


def create_controller() -> SketchPlotController:
    settings = SerialSettings.from_env()
    if os.environ.get("SKETCHPLOT_MOCK") == "1":
        backend = MockBackend()
    elif supports_serial():
        backend = EBBSerialBackend(settings)
    else:
        backend = None
    return SketchPlotController(session=TransportSession(backend, settings))


def create_app(controller: Optional[SketchPlotController] = None) -> FastAPI:
    controller = controller or create_controller()
    app = FastAPI(title="SketchPlot Control Server")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.controller = controller

    def render_summary() -> Dict[str, Any]:
        if controller.last_render is None:
            raise HTTPException(status_code=409, detail="Nothing rendered yet")
        return controller.summary()

    @app.get("/api/health")
    def health() -> Dict[str, str]:
        return {"status": "ok"}

    @app.get("/api/support")
    def support(user_agent: Optional[str] = Header(default=None)) -> Dict[str, Any]:
        return {
            "serial": supports_serial(),
            "session": controller.session.is_supported(),
            "direct_plotting": supports_direct_plotting(user_agent),
        }

    @app.get("/api/sketches")
    def sketch_list() -> Dict[str, Any]:
        return {"sketches": [sketch.describe() for sketch in list_sketches()]}

    @app.post("/api/render")
    def render(payload: RenderRequest) -> Dict[str, Any]:
        context = RenderContext.from_dict(payload.context.model_dump()) if payload.context else None
        try:
            result = controller.render(payload.sketch, payload.params, context)
        except KeyError as exc:
            raise HTTPException(status_code=404, detail=str(exc.args[0])) from exc
        return render_summary() | {"ok": result.ok}

    @app.post("/api/plan")
    def plan(payload: PlanRequest) -> Dict[str, Any]:
        try:
            if payload.config is not None:
                controller.set_plotter_config(payload.config.model_dump(exclude_none=True))
            if payload.mode is not None:
                controller.set_layer_mode(payload.mode)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return render_summary()

    @app.get("/api/preview.svg")
    def preview(hovered: Optional[str] = None) -> Response:
        svg = controller.preview_svg(hovered)
        if svg is None:
            raise HTTPException(status_code=409, detail="Nothing rendered yet")
        return Response(content=svg, media_type="image/svg+xml")

    @app.get("/api/packets")
    def packets() -> Dict[str, Any]:
        items = []
        for packet in controller.packets():
            if isinstance(packet, CommandPacket):
                items.append({"type": "command", "command": packet.command, "layer_id": packet.layer_id})
            else:
                items.append({"type": "pause-marker", "layer_id": packet.layer_id, "layer_name": packet.layer_name})
        return {"packets": items}

    @app.get("/api/status")
    def status() -> Dict[str, Any]:
        return controller.summary() | {"plotting": controller.is_plotting}

    @app.post("/api/plotter/connect")
    async def plotter_connect() -> Dict[str, Any]:
        await controller.connect()
        return controller.session.status.to_dict()

    @app.post("/api/plotter/disconnect")
    async def plotter_disconnect() -> Dict[str, Any]:
        await controller.disconnect()
        return controller.session.status.to_dict()

    @app.post("/api/plotter/start")
    async def plotter_start() -> Dict[str, Any]:
        try:
            await controller.start_plot()
        except RuntimeError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        return controller.session.status.to_dict()

    @app.post("/api/plotter/pause")
    async def plotter_pause() -> Dict[str, Any]:
        controller.pause()
        return controller.session.status.to_dict()

    @app.post("/api/plotter/resume")
    async def plotter_resume() -> Dict[str, Any]:
        controller.resume()
        return controller.session.status.to_dict()

    @app.post("/api/plotter/cancel")
    async def plotter_cancel() -> Dict[str, Any]:
        await controller.cancel()
        return controller.session.status.to_dict()

    return app


app = create_app()


__all__ = ["app", "create_app", "create_controller"]
