"""Configuration models for plot planning and the serial link."""

from __future__ import annotations

import math
import os
from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, Literal, Mapping, Optional, Tuple

LayerMode = Literal["ordered", "flatten", "pause-between"]
LAYER_MODES: Tuple[str, ...] = ("ordered", "flatten", "pause-between")

AxiDrawModel = Literal["A4", "A3", "XLX", "MiniKit", "A2", "A1", "B6"]


@dataclass(frozen=True)
class MachineBounds:
    """Physical travel of a plotter model, in inches."""

    width_in: float
    height_in: float

    def contains(self, x: float, y: float) -> bool:
        return 0 <= x <= self.width_in and 0 <= y <= self.height_in


MODEL_BOUNDS: Dict[str, MachineBounds] = {
    "A4": MachineBounds(11.81, 8.58),
    "A3": MachineBounds(16.93, 11.69),
    "XLX": MachineBounds(23.42, 8.58),
    "MiniKit": MachineBounds(6.3, 4.0),
    "A2": MachineBounds(23.39, 17.01),
    "A1": MachineBounds(34.02, 23.39),
    "B6": MachineBounds(7.48, 5.51),
}


def clamp_percent(value: float) -> float:
    return max(1.0, min(100.0, float(value)))


@dataclass(frozen=True)
class PlotterConfig:
    """Machine and job parameters for a plot."""

    model: AxiDrawModel = "A4"
    speed_pen_down: float = 35
    speed_pen_up: float = 65
    pen_up_delay_ms: int = 140
    pen_down_delay_ms: int = 170
    repeat_count: int = 1

    def __post_init__(self) -> None:
        if self.model not in MODEL_BOUNDS:
            raise ValueError(f"Unknown plotter model: {self.model!r}")

    @property
    def bounds(self) -> MachineBounds:
        return MODEL_BOUNDS[self.model]

    @property
    def copies(self) -> int:
        """Number of passes over each layer; anything below one means one."""
        return max(1, math.floor(self.repeat_count))

    @property
    def pen_down_percent(self) -> float:
        return clamp_percent(self.speed_pen_down)

    @property
    def pen_up_percent(self) -> float:
        return clamp_percent(self.speed_pen_up)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], base: Optional["PlotterConfig"] = None) -> "PlotterConfig":
        base = base or cls()
        changes: Dict[str, Any] = {}
        if "model" in data:
            changes["model"] = str(data["model"])
        for key in ("speed_pen_down", "speed_pen_up"):
            if key in data:
                changes[key] = float(data[key])
        for key in ("pen_up_delay_ms", "pen_down_delay_ms", "repeat_count"):
            if key in data:
                changes[key] = int(data[key])
        return replace(base, **changes)

    @classmethod
    def from_env(cls) -> "PlotterConfig":
        model = os.environ.get("SKETCHPLOT_MODEL")
        return cls(model=model) if model else cls()  # type: ignore[arg-type]


DEFAULT_PLOTTER_CONFIG = PlotterConfig()


@dataclass(frozen=True)
class SerialSettings:
    """Serial link parameters for the EiBotBoard."""

    port: Optional[str] = None
    baudrate: int = 9600
    read_timeout: float = 1.0
    write_pacing_s: float = 0.004
    pause_poll_s: float = 0.12

    @classmethod
    def from_env(cls) -> "SerialSettings":
        settings = cls()
        port = os.environ.get("SKETCHPLOT_PORT")
        baudrate = os.environ.get("SKETCHPLOT_BAUDRATE")
        if port:
            settings = replace(settings, port=port)
        if baudrate:
            settings = replace(settings, baudrate=int(baudrate))
        return settings


__all__ = [
    "AxiDrawModel",
    "DEFAULT_PLOTTER_CONFIG",
    "LAYER_MODES",
    "LayerMode",
    "MODEL_BOUNDS",
    "MachineBounds",
    "PlotterConfig",
    "SerialSettings",
    "clamp_percent",
]
