"""Transport layer for device communication."""

from mrbwriter.transport.base import PortInfo, PortPicker, Transport
from mrbwriter.transport.uart import SerialTransport

__all__ = [
    "PortInfo",
    "PortPicker",
    "SerialTransport",
    "Transport",
]
