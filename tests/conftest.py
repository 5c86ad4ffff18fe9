import asyncio
import time

import pytest

import sketchplot.sketches  # noqa: F401  registers the built-in sketches
from sketchplot.config import SerialSettings
from sketchplot.geometry import Point
from sketchplot.normalize import NormalizedDocument, NormalizedLayer


@pytest.fixture()
def fast_settings():
    """Serial settings without pacing so streaming tests finish quickly."""
    return SerialSettings(write_pacing_s=0.0, pause_poll_s=0.001)


@pytest.fixture()
def two_layer_document():
    return NormalizedDocument(
        width=8,
        height=6,
        units="in",
        layers=[
            NormalizedLayer.from_polylines("one", "One", [[Point(0, 0), Point(1, 0)]]),
            NormalizedLayer.from_polylines("two", "Two", [[Point(0, 1), Point(1, 1)]]),
        ],
    )


async def _wait_for(predicate, timeout=2.0, interval=0.001):
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(interval)


@pytest.fixture()
def wait_for():
    """Coroutine polling `predicate` until it holds."""
    return _wait_for
