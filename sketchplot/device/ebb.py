"""pyserial backend for EiBotBoard driven plotters (AxiDraw and friends).

Blocking pyserial calls run in a worker thread through
:func:`asyncio.to_thread` so the transport's event loop keeps servicing
pause and cancel requests while a write is in flight.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Optional

try:
    import serial  # type: ignore
    from serial.tools import list_ports
except ImportError as exc:  # pragma: no cover - handled at runtime
    raise RuntimeError("pyserial is required. Install with: pip install pyserial") from exc

from ..config import SerialSettings
from .base import PlotterConnectionError

logger = logging.getLogger(__name__)

EBB_VID = 0x04D8
EBB_PID = 0xFD92
EBB_DESCRIPTION = "EiBotBoard"


class _SerialWriter:
    def __init__(self, port: "EBBSerialPort") -> None:
        self._port = port
        self._released = False

    async def write(self, data: bytes) -> None:
        if self._released:
            raise PlotterConnectionError("Writer already released")
        await asyncio.to_thread(self._port._write, data)

    def release(self) -> None:
        if not self._released:
            self._released = True
            self._port._writer_held = False


class EBBSerialPort:
    """One serial port, opened on demand."""

    def __init__(self, device: str, settings: SerialSettings) -> None:
        self.device = device
        self.settings = settings
        self._serial: Optional[serial.Serial] = None
        self._writer_held = False

    @property
    def writable(self) -> bool:
        return bool(self._serial and self._serial.is_open)

    async def open(self, baudrate: int) -> None:
        try:
            self._serial = await asyncio.to_thread(
                serial.Serial,
                self.device,
                baudrate=baudrate,
                timeout=self.settings.read_timeout,
            )
        except serial.SerialException as exc:  # pragma: no cover - hardware dependent
            raise PlotterConnectionError(str(exc)) from exc
        logger.info("Opened %s at %s baud", self.device, baudrate)

    async def close(self) -> None:
        ser, self._serial = self._serial, None
        self._writer_held = False
        if ser is not None and ser.is_open:
            await asyncio.to_thread(ser.close)
            logger.info("Closed %s", self.device)

    def get_writer(self) -> _SerialWriter:
        if not self.writable:
            raise PlotterConnectionError("Device is not connected")
        if self._writer_held:
            raise PlotterConnectionError("Port writer is already in use")
        self._writer_held = True
        return _SerialWriter(self)

    def _write(self, data: bytes) -> None:
        ser = self._serial
        if ser is None or not ser.is_open:
            raise PlotterConnectionError("Device is not connected")
        try:
            ser.write(data)
            ser.flush()
        except serial.SerialException as exc:  # pragma: no cover - hardware dependent
            raise PlotterConnectionError(str(exc)) from exc


class EBBSerialBackend:
    """Locates the plotter's serial port and hands out :class:`EBBSerialPort`."""

    def __init__(self, settings: Optional[SerialSettings] = None) -> None:
        self.settings = settings or SerialSettings()

    @staticmethod
    def find_ebb_port() -> Optional[str]:
        for info in list_ports.comports():
            if EBB_DESCRIPTION in (info.description or ""):
                return info.device
            if info.vid == EBB_VID and info.pid == EBB_PID:
                return info.device
        return None

    async def request_port(self) -> EBBSerialPort:
        device = self.settings.port or await asyncio.to_thread(self.find_ebb_port)
        if not device:
            raise PlotterConnectionError("No EiBotBoard found. Is the plotter plugged in?")
        return EBBSerialPort(device, self.settings)


__all__ = ["EBBSerialBackend", "EBBSerialPort"]
