"""Compile a plot job plan into EiBotBoard (EBB) command packets.

Only the commands the plotter actually needs are produced::

    EM,1,1 / EM,0,0          enable / disable motors
    SP,0,<ms> / SP,1,<ms>    pen up / pen down, then wait <ms>
    XM,<ms>,<dx>,<dy>        relative move in motor steps

Rounding is ``floor(x + 0.5)`` everywhere and is applied per segment, so the
step error of long chains of short segments is not carried forward.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Union

from .config import PlotterConfig, clamp_percent
from .geometry import Point, Polyline, distance
from .planner import PlotJobPlan

STEPS_PER_INCH = 2874
MAX_DRAW_SPEED_IN_PER_SEC = 8.6979
MAX_TRAVEL_SPEED_IN_PER_SEC = 15.0
MIN_SPEED_IN_PER_SEC = 0.1

ENABLE_MOTORS = "EM,1,1"
DISABLE_MOTORS = "EM,0,0"
EMERGENCY_STOP = "ES"


@dataclass(frozen=True)
class CommandPacket:
    command: str
    layer_id: Optional[str] = None


@dataclass(frozen=True)
class PauseMarker:
    """Tells the transport to wait for the operator before ``layer_id``."""

    layer_id: str
    layer_name: str


EbbPacket = Union[CommandPacket, PauseMarker]


# ---------------------------------------------------------------------------
# Step and timing math
# ---------------------------------------------------------------------------


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def to_steps(delta_in: float) -> int:
    return round_half_up(delta_in * STEPS_PER_INCH)


def speed_from_percent(percent: float, max_speed: float) -> float:
    return max(MIN_SPEED_IN_PER_SEC, clamp_percent(percent) / 100 * max_speed)


def move_duration_ms(start: Point, end: Point, pen_down: bool, config: PlotterConfig) -> int:
    if pen_down:
        speed = speed_from_percent(config.pen_down_percent, MAX_DRAW_SPEED_IN_PER_SEC)
    else:
        speed = speed_from_percent(config.pen_up_percent, MAX_TRAVEL_SPEED_IN_PER_SEC)
    return max(1, round_half_up(distance(start, end) / speed * 1000))


def xm_command(start: Point, end: Point, config: PlotterConfig, pen_down: bool) -> str:
    duration = move_duration_ms(start, end, pen_down, config)
    return f"XM,{duration},{to_steps(end[0] - start[0])},{to_steps(end[1] - start[1])}"


def pen_up_command(config: PlotterConfig) -> str:
    return f"SP,0,{config.pen_up_delay_ms}"


def pen_down_command(config: PlotterConfig) -> str:
    return f"SP,1,{config.pen_down_delay_ms}"


# ---------------------------------------------------------------------------
# Packet generation
# ---------------------------------------------------------------------------


def _append_polyline(
    packets: List[EbbPacket],
    cursor: Point,
    polyline: Polyline,
    config: PlotterConfig,
    layer_id: str,
) -> Point:
    current = cursor
    start = polyline[0]

    if distance(current, start) > 0:
        packets.append(CommandPacket(pen_up_command(config), layer_id))
        packets.append(CommandPacket(xm_command(current, start, config, pen_down=False), layer_id))
        current = start

    packets.append(CommandPacket(pen_down_command(config), layer_id))
    for target in polyline[1:]:
        packets.append(CommandPacket(xm_command(current, target, config, pen_down=True), layer_id))
        current = target
    packets.append(CommandPacket(pen_up_command(config), layer_id))
    return current


def build_ebb_packets(plan: PlotJobPlan, config: PlotterConfig) -> List[EbbPacket]:
    """Translate ``plan`` into the ordered packet stream for the plotter."""
    packets: List[EbbPacket] = [
        CommandPacket(ENABLE_MOTORS),
        CommandPacket(pen_up_command(config)),
    ]
    cursor = Point(0.0, 0.0)

    for index, layer in enumerate(plan.layers):
        if plan.mode == "pause-between" and index > 0:
            packets.append(PauseMarker(layer_id=layer.id, layer_name=layer.name))
        for polyline in layer.polylines:
            if len(polyline) < 2:
                continue
            cursor = _append_polyline(packets, cursor, polyline, config, layer.id)

    packets.append(CommandPacket(DISABLE_MOTORS))
    return packets


# ---------------------------------------------------------------------------
# Packet stream summaries
# ---------------------------------------------------------------------------


def count_commands(packets: Iterable[EbbPacket]) -> int:
    return sum(1 for packet in packets if isinstance(packet, CommandPacket))


def estimate_duration_ms(packets: Iterable[EbbPacket]) -> int:
    """Sum of move durations and pen delays; pauses count as zero."""
    total = 0
    for packet in packets:
        if not isinstance(packet, CommandPacket):
            continue
        parts = packet.command.split(",")
        if parts[0] == "XM":
            total += int(parts[1])
        elif parts[0] == "SP" and len(parts) > 2:
            total += int(parts[2])
    return total


__all__ = [
    "CommandPacket",
    "DISABLE_MOTORS",
    "EMERGENCY_STOP",
    "ENABLE_MOTORS",
    "EbbPacket",
    "MAX_DRAW_SPEED_IN_PER_SEC",
    "MAX_TRAVEL_SPEED_IN_PER_SEC",
    "PauseMarker",
    "STEPS_PER_INCH",
    "build_ebb_packets",
    "count_commands",
    "estimate_duration_ms",
    "move_duration_ms",
    "speed_from_percent",
    "to_steps",
    "xm_command",
]
