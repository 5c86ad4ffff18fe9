"""Streaming session that feeds EBB packets to the plotter.

The session owns one serial port, streams packets in plan order with a short
pacing delay after each write, and honours pause, resume and cancel requests
issued from the same event loop.  Failures never escape: they become status
transitions reported through the status callback.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import asdict, dataclass, replace
from typing import Any, Callable, Dict, Literal, Optional, Sequence

from .config import SerialSettings
from .device.base import PortWriter, SerialBackend, SerialPort
from .ebb import EMERGENCY_STOP, EbbPacket, PauseMarker

logger = logging.getLogger(__name__)

PlotterState = Literal["idle", "connecting", "connected", "plotting", "paused", "canceled", "error"]


@dataclass(frozen=True)
class PlotterStatus:
    state: PlotterState
    message: Optional[str] = None
    total_packets: Optional[int] = None
    sent_packets: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {key: value for key, value in asdict(self).items() if value is not None}


StatusCallback = Callable[[PlotterStatus], None]

UNSUPPORTED_MESSAGE = "Serial is not supported in this environment."


class TransportSession:
    """Connection and streaming state machine for one plotter."""

    def __init__(
        self,
        backend: Optional[SerialBackend] = None,
        settings: Optional[SerialSettings] = None,
        *,
        on_status: Optional[StatusCallback] = None,
    ) -> None:
        self.backend = backend
        self.settings = settings or SerialSettings()
        self.on_status = on_status

        self._port: Optional[SerialPort] = None
        self._writer: Optional[PortWriter] = None
        self._status = PlotterStatus(state="idle", message="Not connected")
        self._paused = False
        self._canceled = False
        self._sending = False

    # ------------------------------------------------------------------
    @property
    def status(self) -> PlotterStatus:
        return self._status

    @property
    def is_sending(self) -> bool:
        return self._sending

    def is_supported(self) -> bool:
        return self.backend is not None

    def is_connected(self) -> bool:
        return self._status.state in ("connected", "plotting", "paused")

    def _update(self, status: PlotterStatus, callback: Optional[StatusCallback] = None) -> None:
        self._status = status
        callback = callback or self.on_status
        if callback is not None:
            callback(status)

    # ------------------------------------------------------------------
    # Connection lifecycle
    # ------------------------------------------------------------------
    async def connect(self, on_status: Optional[StatusCallback] = None) -> None:
        if self.backend is None:
            self._update(PlotterStatus("error", UNSUPPORTED_MESSAGE), on_status)
            return

        self._update(PlotterStatus("connecting", "Connecting to plotter..."), on_status)
        try:
            self._port = await self.backend.request_port()
            await self._port.open(self.settings.baudrate)
        except Exception as exc:
            logger.error("Plotter connection failed: %s", exc)
            self._port = None
            self._update(PlotterStatus("error", str(exc) or "Connection failed"), on_status)
            return
        logger.info("Connected to plotter at %s baud", self.settings.baudrate)
        self._update(PlotterStatus("connected", "Connected"), on_status)

    async def disconnect(self, on_status: Optional[StatusCallback] = None) -> None:
        self._paused = False
        self._canceled = False

        port, self._port = self._port, None
        if port is not None:
            try:
                await port.close()
            except Exception as exc:
                logger.debug("Ignoring close error on stale port: %s", exc)

        logger.info("Disconnected from plotter")
        self._update(PlotterStatus("idle", "Disconnected"), on_status)

    # ------------------------------------------------------------------
    # Streaming
    # ------------------------------------------------------------------
    async def _wait_while_paused(self) -> None:
        while self._paused and not self._canceled and self._port is not None:
            await asyncio.sleep(self.settings.pause_poll_s)

    async def send(self, packets: Sequence[EbbPacket], on_status: Optional[StatusCallback] = None) -> None:
        """Stream ``packets`` to the open port.

        Returns once every packet is written, the plot is canceled, the
        session is disconnected or a write fails.  A second call while a send
        is running does nothing.
        """
        port = self._port
        if port is None or not port.writable:
            self._update(PlotterStatus("error", "No plotter connection found."), on_status)
            return
        if self._sending:
            return

        self._sending = True
        self._paused = False
        self._canceled = False
        total = len(packets)
        sent = 0

        def progress(state: PlotterState, message: str) -> PlotterStatus:
            return PlotterStatus(state, message, total_packets=total, sent_packets=sent)

        try:
            self._writer = port.get_writer()
            self._update(progress("plotting", "Plotting in progress"), on_status)

            for packet in packets:
                if self._canceled:
                    self._update(progress("canceled", "Plot canceled"), on_status)
                    break
                await self._wait_while_paused()
                if self._canceled or self._port is not port:
                    break

                if isinstance(packet, PauseMarker):
                    self._paused = True
                    self._update(progress("paused", f"Paused before layer {packet.layer_name}"), on_status)
                    await self._wait_while_paused()
                    if self._canceled or self._port is not port:
                        break
                    self._update(progress("plotting", "Resumed plotting"), on_status)
                    continue

                await self._writer.write(f"{packet.command}\r".encode("ascii"))
                sent += 1
                if not self._canceled:
                    if self._paused:
                        self._update(progress("paused", "Paused"), on_status)
                    else:
                        self._update(progress("plotting", "Plotting in progress"), on_status)
                await asyncio.sleep(self.settings.write_pacing_s)

            if not self._canceled and self._port is port:
                logger.info("Plot complete: %d/%d packets sent", sent, total)
                self._update(progress("connected", "Plot complete"), on_status)
        except Exception as exc:
            if self._port is not port:
                logger.debug("Write interrupted by disconnect after %d/%d packets: %s", sent, total, exc)
                return
            logger.error("Plot command failed after %d/%d packets: %s", sent, total, exc)
            self._update(progress("error", str(exc) or "Plot command failed"), on_status)
        finally:
            if self._writer is not None:
                self._writer.release()
                self._writer = None
            self._sending = False

    # ------------------------------------------------------------------
    # Operator controls
    # ------------------------------------------------------------------
    def pause(self, on_status: Optional[StatusCallback] = None) -> None:
        if self._status.state != "plotting":
            return
        self._paused = True
        self._update(replace(self._status, state="paused", message="Paused"), on_status)

    def resume(self, on_status: Optional[StatusCallback] = None) -> None:
        if self._status.state != "paused":
            return
        self._paused = False
        self._update(replace(self._status, state="plotting", message="Resumed"), on_status)

    async def cancel(self, on_status: Optional[StatusCallback] = None) -> None:
        self._canceled = True
        self._paused = False

        port = self._port
        if port is not None and port.writable:
            writer, owned = self._writer, False
            try:
                if writer is None:
                    writer, owned = port.get_writer(), True
                await writer.write(f"{EMERGENCY_STOP}\r".encode("ascii"))
            except Exception as exc:
                logger.warning("Failed to send emergency stop: %s", exc)
            finally:
                if owned and writer is not None:
                    writer.release()

        logger.info("Plot cancel requested")
        self._update(replace(self._status, state="canceled", message="Cancel request sent"), on_status)


__all__ = ["PlotterState", "PlotterStatus", "StatusCallback", "TransportSession", "UNSUPPORTED_MESSAGE"]
