"""Top-level owner of one writer session and its collaborators."""

from __future__ import annotations

import asyncio

from mrbwriter.config.preferences import Preferences
from mrbwriter.core.autoconnect import AutoConnectPolicy, ReloadHook
from mrbwriter.core.compile import CompileStatusMachine, Compiler
from mrbwriter.core.dispatch import CommandDispatcher
from mrbwriter.core.log_buffer import LogBuffer
from mrbwriter.core.reporting import (
    CONNECT_FAILED,
    LISTEN_FAILED,
    WRITE_FAILED,
    ErrorReporter,
)
from mrbwriter.core.session import DeviceSession
from mrbwriter.models.compile import CompileStatus
from mrbwriter.models.outcome import Outcome
from mrbwriter.models.target import Target
from mrbwriter.transport.base import PortPicker, Transport
from mrbwriter.utils.logging import get_logger

logger = get_logger(__name__)


class WriterController:
    """Wires the compile flow, the device session and user actions.

    One controller exists per page load. It builds the session once and
    hands it to the auto-connect policy and the command dispatcher.

    Usage:
        controller = WriterController(compiler, transport, preferences, reporter)
        await controller.startup("abc123")
        await controller.connect(picker)
        await controller.write_code()
    """

    def __init__(
        self,
        compiler: Compiler,
        transport: Transport,
        preferences: Preferences,
        reporter: ErrorReporter,
        reload: ReloadHook | None = None,
    ) -> None:
        self._preferences = preferences
        self._reporter = reporter
        transport.set_target(preferences.target)
        self.log = LogBuffer()
        self.session = DeviceSession(transport, self.log)
        self.compile = CompileStatusMachine(compiler)
        self.auto_connect = AutoConnectPolicy(self.session, preferences, reload=reload)
        self.dispatcher = CommandDispatcher(self.session, reporter)

    @property
    def target(self) -> Target:
        return self.session.target

    @property
    def compile_status(self) -> CompileStatus:
        return self.compile.status

    async def startup(self, source_id: str | None) -> tuple[CompileStatus, Outcome]:
        """Run the compile flow and auto-connect.

        The two tasks touch disjoint state and may complete in either order.
        """
        logger.info("writer_startup", source_id=source_id, auto_connect=self.auto_connect.enabled)
        status, outcome = await asyncio.gather(
            self.compile.run(source_id),
            self.auto_connect.run(),
        )
        return status, outcome

    async def connect(self, port_picker: PortPicker) -> Outcome:
        """User-initiated connect; on success keeps listening until the port closes."""
        outcome = await self.session.connect(port_picker)
        if outcome.is_failure:
            await self._reporter.report(CONNECT_FAILED, outcome.error)
            return outcome
        return await self.listen()

    async def listen(self) -> Outcome:
        outcome = await self.session.start_listen()
        if outcome.is_failure:
            await self._reporter.report(LISTEN_FAILED, outcome.error)
        return outcome

    async def send(self, text: str) -> Outcome:
        return await self.dispatcher.dispatch(text)

    async def write_code(self) -> Outcome:
        """Flash the compiled binary; does nothing until a compile succeeded."""
        binary = self.compile.binary
        if binary is None:
            logger.info("write_code_ignored", state=self.compile.state.value)
            return Outcome.ok()
        outcome = await self.session.write_code(binary)
        if outcome.is_failure:
            await self._reporter.report(WRITE_FAILED, outcome.error)
        return outcome

    def select_target(self, target: Target) -> None:
        target = Target(target)
        self.session.set_target(target)
        self._preferences.target = target

    async def set_auto_connect(self, enabled: bool) -> None:
        await self.auto_connect.set_enabled(enabled)

    async def shutdown(self) -> None:
        await self.session.disconnect()
