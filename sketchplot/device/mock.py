"""In-memory mock plotter used for development and unit tests."""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import List, Optional

from .base import PlotterConnectionError


class _MockWriter:
    def __init__(self, port: "MockPort") -> None:
        self._port = port

    async def write(self, data: bytes) -> None:
        await self._port._write(data)

    def release(self) -> None:
        self._port.writer_held = False


@dataclass
class MockPort:
    """Records every command line written to it.

    ``fail_after`` makes the write following the given number of successful
    writes raise; ``write_delay_s`` simulates a slow link.
    """

    fail_open: bool = False
    fail_close: bool = False
    fail_after: Optional[int] = None
    write_delay_s: float = 0.0

    def __post_init__(self) -> None:
        self.is_open = False
        self.baudrate: Optional[int] = None
        self.writer_held = False
        self.lines: List[str] = []
        self._buffer = ""

    @property
    def writable(self) -> bool:
        return self.is_open

    async def open(self, baudrate: int) -> None:
        if self.fail_open:
            raise PlotterConnectionError("Mock port refused to open")
        self.baudrate = baudrate
        self.is_open = True

    async def close(self) -> None:
        self.is_open = False
        self.writer_held = False
        if self.fail_close:
            raise PlotterConnectionError("Mock port already gone")

    def get_writer(self) -> _MockWriter:
        if not self.is_open:
            raise PlotterConnectionError("Device is not connected")
        if self.writer_held:
            raise PlotterConnectionError("Port writer is already in use")
        self.writer_held = True
        return _MockWriter(self)

    async def _write(self, data: bytes) -> None:
        if self.write_delay_s > 0:
            await asyncio.sleep(self.write_delay_s)
        if not self.is_open:
            raise PlotterConnectionError("Device is not connected")
        if self.fail_after is not None and len(self.lines) >= self.fail_after:
            raise PlotterConnectionError("Mock write failure")
        self._buffer += data.decode("ascii")
        *complete, self._buffer = self._buffer.split("\r")
        self.lines.extend(complete)


@dataclass
class MockBackend:
    """Serial backend handing out a single :class:`MockPort`."""

    port: MockPort = field(default_factory=MockPort)
    fail_request: bool = False

    async def request_port(self) -> MockPort:
        if self.fail_request:
            raise PlotterConnectionError("No port selected")
        return self.port


__all__ = ["MockBackend", "MockPort"]
