"""Device abstractions used by the SketchPlot transport."""

from .base import PlotterConnectionError, PortWriter, SerialBackend, SerialPort
from .ebb import EBBSerialBackend, EBBSerialPort
from .mock import MockBackend, MockPort

__all__ = [
    "EBBSerialBackend",
    "EBBSerialPort",
    "MockBackend",
    "MockPort",
    "PlotterConnectionError",
    "PortWriter",
    "SerialBackend",
    "SerialPort",
]
