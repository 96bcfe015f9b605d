"""Abstract transport layer for device communication."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import AsyncIterator, Awaitable, Callable

from mrbwriter.models.target import Target, TargetProfile, profile_for


@dataclass(frozen=True)
class PortInfo:
    """A serial port the transport can open."""
    device: str
    description: str = ""
    hwid: str = ""

    def __str__(self) -> str:
        if self.description and self.description != self.device:
            return f"{self.device} ({self.description})"
        return self.device


# Yields the port to open: a user-driven chooser or a pre-authorized lookup.
PortPicker = Callable[[], Awaitable[PortInfo]]


class Transport(ABC):
    """Abstract base for device transports.

    A transport owns at most one open port. Received data is delivered by
    ``lines()`` as one event per received line, in receipt order.
    """

    def __init__(self, target: Target) -> None:
        self._target = target

    @property
    def target(self) -> Target:
        return self._target

    @property
    def profile(self) -> TargetProfile:
        return profile_for(self._target)

    def set_target(self, target: Target) -> None:
        """Switch target configuration for subsequent operations."""
        self._target = Target(target)

    @property
    @abstractmethod
    def is_open(self) -> bool:
        """Return True while a port is open."""

    @property
    @abstractmethod
    def port(self) -> PortInfo | None:
        """The currently open port, if any."""

    @abstractmethod
    async def list_ports(self) -> list[PortInfo]:
        """List every port present on the system."""

    @abstractmethod
    async def list_authorized_ports(self) -> list[PortInfo]:
        """List present ports the user has connected to before."""

    @abstractmethod
    async def open(self, port: PortInfo) -> None:
        """Open *port* with the current target's line settings."""

    @abstractmethod
    async def close(self) -> None:
        """Close the open port; a running ``lines()`` iteration ends."""

    @abstractmethod
    def lines(self) -> AsyncIterator[str]:
        """Iterate over received lines until the port closes.

        Raises:
            TransportError: If reading from the port fails.
        """

    @abstractmethod
    async def send_command(self, text: str) -> None:
        """Write *text* followed by the target's line ending."""

    @abstractmethod
    async def write_code(self, binary: bytes) -> None:
        """Flash *binary* using the device's writer handshake."""
