"""Serial (USB CDC / UART) transport implementation using pyserial."""

from __future__ import annotations

import asyncio
import codecs
from collections import deque
from typing import AsyncIterator, Callable

import serial
from serial.tools.list_ports import comports

from mrbwriter.config.preferences import Preferences
from mrbwriter.exceptions import ConnectFailedError, TransportError
from mrbwriter.models.target import DEFAULT_TARGET, Target
from mrbwriter.transport.base import PortInfo, Transport
from mrbwriter.transport.protocol import send_line, write_program
from mrbwriter.utils.logging import get_logger

logger = get_logger(__name__)

# Seconds a single blocking read may wait before yielding back to the loop
POLL_TIMEOUT = 0.1


class SerialTransport(Transport):
    """Transport over a local serial port.

    Blocking pyserial calls run in worker threads via ``asyncio.to_thread``.
    Ports opened successfully are recorded in the preferences so the
    auto-connect policy can find them again.
    """

    def __init__(
        self,
        target: Target = DEFAULT_TARGET,
        preferences: Preferences | None = None,
        serial_factory: Callable[..., serial.Serial] = serial.Serial,
        poll_timeout: float = POLL_TIMEOUT,
    ) -> None:
        super().__init__(target)
        self._preferences = preferences
        self._serial_factory = serial_factory
        self._poll_timeout = poll_timeout
        self._serial: serial.Serial | None = None
        self._port: PortInfo | None = None
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._pending = ""
        self._ready: deque[str] = deque()
        self._listening = False
        # Protocol responses routed from the listen loop during a handshake
        self._responses: asyncio.Queue[str] | None = None

    @property
    def is_open(self) -> bool:
        return self._serial is not None

    @property
    def port(self) -> PortInfo | None:
        return self._port

    def set_target(self, target: Target) -> None:
        super().set_target(target)
        if self._serial is not None:
            self._serial.baudrate = self.profile.baud_rate
            logger.info("serial_baud_changed", baud=self.profile.baud_rate)

    # --- Port discovery ---

    async def list_ports(self) -> list[PortInfo]:
        found = await asyncio.to_thread(comports)
        return [
            PortInfo(device=p.device, description=p.description or "", hwid=p.hwid or "")
            for p in found
        ]

    async def list_authorized_ports(self) -> list[PortInfo]:
        if self._preferences is None:
            return []
        present = {p.device: p for p in await self.list_ports()}
        return [present[d] for d in self._preferences.authorized_ports if d in present]

    # --- Connection ---

    async def open(self, port: PortInfo) -> None:
        if self._serial is not None:
            await self.close()

        baud = self.profile.baud_rate
        logger.info("serial_opening", port=port.device, baud=baud)
        try:
            self._serial = await asyncio.to_thread(
                self._serial_factory, port.device, baud, timeout=self._poll_timeout
            )
        except (serial.SerialException, OSError, ValueError) as exc:
            raise ConnectFailedError(f"Could not open {port.device}") from exc

        self._port = port
        self._decoder.reset()
        self._pending = ""
        self._ready.clear()
        if self._preferences is not None:
            self._preferences.authorize_port(port.device)
        logger.info("serial_opened", port=port.device)

    async def close(self) -> None:
        ser, self._serial = self._serial, None
        port, self._port = self._port, None
        if ser is None:
            return
        try:
            await asyncio.to_thread(ser.close)
        except (serial.SerialException, OSError):
            logger.warning("serial_close_error", port=port.device if port else None, exc_info=True)
        logger.info("serial_closed", port=port.device if port else None)

    def _require_open(self) -> serial.Serial:
        if self._serial is None:
            raise TransportError("Port is not open")
        return self._serial

    # --- Reading ---

    @staticmethod
    def _read_available(ser: serial.Serial) -> bytes:
        return ser.read(ser.in_waiting or 1)

    def _split(self, data: bytes) -> list[str]:
        """Decode *data* and return the lines it completes."""
        self._pending += self._decoder.decode(data)
        *complete, self._pending = self._pending.split("\n")
        return [line.rstrip("\r") for line in complete]

    async def lines(self) -> AsyncIterator[str]:
        ser = self._require_open()
        self._listening = True
        try:
            # Ends once the port is closed or replaced by a reopen
            while self._serial is ser:
                try:
                    data = await asyncio.to_thread(self._read_available, ser)
                except (serial.SerialException, OSError, TypeError, AttributeError) as exc:
                    if self._serial is not ser:
                        # Closed while the read was in flight
                        break
                    raise TransportError("Reading from the serial port failed") from exc
                for line in self._split(data):
                    if self._responses is not None:
                        self._responses.put_nowait(line)
                    yield line
        finally:
            self._listening = False

    async def read_line(self, timeout: float) -> str:
        """Return the next line for the writer handshake."""
        if self._listening and self._responses is not None:
            return await asyncio.wait_for(self._responses.get(), timeout)

        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while not self._ready:
            if loop.time() >= deadline:
                raise asyncio.TimeoutError
            ser = self._require_open()
            try:
                data = await asyncio.to_thread(self._read_available, ser)
            except (serial.SerialException, OSError) as exc:
                raise TransportError("Reading from the serial port failed") from exc
            self._ready.extend(self._split(data))
        return self._ready.popleft()

    # --- Writing ---

    @staticmethod
    def _write_all(ser: serial.Serial, data: bytes) -> None:
        ser.write(data)
        ser.flush()

    async def write(self, data: bytes) -> None:
        ser = self._require_open()
        try:
            await asyncio.to_thread(self._write_all, ser, data)
        except (serial.SerialException, OSError) as exc:
            raise TransportError("Writing to the serial port failed") from exc

    async def send_command(self, text: str) -> None:
        await send_line(self, text, self.profile)

    async def write_code(self, binary: bytes) -> None:
        self._require_open()
        self._responses = asyncio.Queue()
        try:
            await write_program(self, binary, self.profile)
        finally:
            self._responses = None
