"""Request and response models for the HTTP API."""
from __future__ import annotations

from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field


class ContextModel(BaseModel):
    width: float = 8.0
    height: float = 6.0
    units: Literal["in", "mm"] = "in"
    seed: int = 1


class RenderRequest(BaseModel):
    sketch: str
    params: Dict[str, Any] = Field(default_factory=dict)
    context: Optional[ContextModel] = None


class PlotterConfigModel(BaseModel):
    model: Optional[str] = None
    speed_pen_down: Optional[float] = None
    speed_pen_up: Optional[float] = None
    pen_up_delay_ms: Optional[int] = None
    pen_down_delay_ms: Optional[int] = None
    repeat_count: Optional[int] = None


class PlanRequest(BaseModel):
    mode: Optional[Literal["ordered", "flatten", "pause-between"]] = None
    config: Optional[PlotterConfigModel] = None
