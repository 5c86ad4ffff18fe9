"""Serial capability protocols shared by the real and mock backends."""
from __future__ import annotations

from typing import Protocol


class PlotterConnectionError(RuntimeError):
    """Raised when a serial operation fails due to connectivity issues."""


class PortWriter(Protocol):
    """Exclusive write handle on an open port."""

    async def write(self, data: bytes) -> None:
        ...

    def release(self) -> None:
        ...


class SerialPort(Protocol):
    @property
    def writable(self) -> bool:
        ...

    async def open(self, baudrate: int) -> None:
        ...

    async def close(self) -> None:
        ...

    def get_writer(self) -> PortWriter:
        """Acquire the write handle.

        Raises :class:`PlotterConnectionError` when the port is not writable or
        another writer already holds it.
        """
        ...


class SerialBackend(Protocol):
    async def request_port(self) -> SerialPort:
        ...


__all__ = ["PlotterConnectionError", "PortWriter", "SerialBackend", "SerialPort"]
