"""Device session: connect, listen, send and flash over one transport."""

from __future__ import annotations

import asyncio
from enum import StrEnum
from typing import Callable

from mrbwriter.core.log_buffer import LogBuffer
from mrbwriter.exceptions import (
    ConnectFailedError,
    ListenFailedError,
    MrbWriterError,
    SendFailedError,
    WriteFailedError,
)
from mrbwriter.models.outcome import Outcome
from mrbwriter.models.target import Target
from mrbwriter.transport.base import PortInfo, PortPicker, Transport
from mrbwriter.utils.logging import get_logger

logger = get_logger(__name__)

StateListener = Callable[["SessionState"], None]


class SessionState(StrEnum):
    """Connection state of a DeviceSession."""
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class DeviceSession:
    """Exclusive handle to one device connection.

    Every operation returns an Outcome instead of raising. A failed
    connect leaves the session disconnected; a failed send or write
    leaves an open session open.
    """

    def __init__(self, transport: Transport, log: LogBuffer | None = None) -> None:
        self._transport = transport
        self._log = log if log is not None else LogBuffer()
        self._state = SessionState.DISCONNECTED
        self._listening = False
        self._listen_done: asyncio.Event | None = None
        self._state_listeners: list[StateListener] = []

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state == SessionState.CONNECTED

    @property
    def is_listening(self) -> bool:
        return self._listening

    @property
    def log(self) -> LogBuffer:
        return self._log

    @property
    def target(self) -> Target:
        return self._transport.target

    @property
    def port(self) -> PortInfo | None:
        return self._transport.port

    @property
    def transport(self) -> Transport:
        return self._transport

    def on_state_change(self, listener: StateListener) -> None:
        self._state_listeners.append(listener)

    def _set_state(self, state: SessionState) -> None:
        if state == self._state:
            return
        self._state = state
        logger.debug("session_state", state=state.value)
        for listener in list(self._state_listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("session_state_listener_failed")

    def set_target(self, target: Target) -> None:
        """Update the target used by subsequent operations."""
        self._transport.set_target(target)
        logger.info("session_target", target=Target(target).value)

    async def connect(self, port_picker: PortPicker) -> Outcome:
        """Obtain a port from *port_picker* and open it.

        A connected session first closes its port and waits for the running
        listen loop to finish.
        """
        if self._state == SessionState.CONNECTING:
            return Outcome.fail(ConnectFailedError("Connection already in progress"))

        previous = self._state
        self._set_state(SessionState.CONNECTING)
        try:
            port = await port_picker()
        except Exception as exc:
            logger.info("session_port_not_selected", error=str(exc))
            if previous == SessionState.CONNECTED and not self._transport.is_open:
                previous = SessionState.DISCONNECTED
            self._set_state(previous)
            return Outcome.fail(ConnectFailedError("No port was selected", cause=exc))

        if previous == SessionState.CONNECTED:
            await self._release_port()

        try:
            await self._transport.open(port)
        except Exception as exc:
            logger.warning("session_connect_failed", port=port.device, error=str(exc))
            self._set_state(SessionState.DISCONNECTED)
            return Outcome.fail(ConnectFailedError(f"Could not open {port.device}", cause=exc))

        self._set_state(SessionState.CONNECTED)
        logger.info("session_connected", port=port.device, target=self.target.value)
        return Outcome.ok()

    async def start_listen(self) -> Outcome:
        """Feed received lines into the log until the transport closes."""
        if not self.is_connected:
            return Outcome.fail(ListenFailedError("Not connected"))
        if self._listening:
            return Outcome.fail(ListenFailedError("Already listening"))

        self._listening = True
        done = self._listen_done = asyncio.Event()
        logger.info("session_listen_started")
        try:
            async for line in self._transport.lines():
                self._log.append(line)
        except Exception as exc:
            if self._state == SessionState.CONNECTING:
                # Port was released by a reconnect while a read was in flight
                logger.info("session_listen_superseded", error=str(exc))
                return Outcome.ok()
            logger.warning("session_listen_failed", error=str(exc))
            await self._drop_connection()
            return Outcome.fail(ListenFailedError("Error while receiving", cause=exc))
        finally:
            self._listening = False
            done.set()

        logger.info("session_listen_stopped")
        # A reconnect in progress owns the state from here
        if self._state == SessionState.CONNECTED and not self._transport.is_open:
            self._set_state(SessionState.DISCONNECTED)
        return Outcome.ok()

    async def send_command(self, text: str) -> Outcome:
        """Write *text* verbatim; an empty string is forwarded too."""
        if not self.is_connected:
            return Outcome.fail(SendFailedError("Not connected"))
        try:
            await self._transport.send_command(text)
        except Exception as exc:
            logger.warning("session_send_failed", error=str(exc))
            return Outcome.fail(SendFailedError("Error while sending", cause=exc))
        logger.debug("session_command_sent", command=text)
        return Outcome.ok()

    async def write_code(self, binary: bytes | None) -> Outcome:
        """Flash *binary*; a missing binary is a no-op."""
        if binary is None:
            logger.info("session_write_skipped", reason="no_binary")
            return Outcome.ok()
        if not self.is_connected:
            return Outcome.fail(WriteFailedError("Not connected"))
        try:
            await self._transport.write_code(binary)
        except Exception as exc:
            logger.warning("session_write_failed", size=len(binary), error=str(exc))
            return Outcome.fail(WriteFailedError("Error while writing", cause=exc))
        logger.info("session_code_written", size=len(binary), target=self.target.value)
        return Outcome.ok()

    async def disconnect(self) -> None:
        await self._drop_connection()
        logger.info("session_disconnected")

    async def _release_port(self) -> None:
        """Close the current port and wait for its listen loop to end."""
        try:
            await self._transport.close()
        except MrbWriterError:
            logger.warning("session_close_failed", exc_info=True)
        if self._listening and self._listen_done is not None:
            await self._listen_done.wait()
        logger.info("session_port_released")

    async def _drop_connection(self) -> None:
        try:
            await self._transport.close()
        except MrbWriterError:
            logger.warning("session_close_failed", exc_info=True)
        self._set_state(SessionState.DISCONNECTED)
