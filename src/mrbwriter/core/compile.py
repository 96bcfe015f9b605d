"""Fetch-and-compile state machine, run once per page load."""

from __future__ import annotations

import base64
import binascii
from typing import Callable, Protocol

from mrbwriter.exceptions import CompileFailedError
from mrbwriter.models.compile import CompileResponse, CompileState, CompileStatus, SourceCode
from mrbwriter.utils.logging import get_logger

logger = get_logger(__name__)

NO_SOURCE_MESSAGE = "No source code found."
COMPILE_FAILED_MESSAGE = "Compile failed."

StatusListener = Callable[[CompileStatus], None]


class Compiler(Protocol):
    """The subset of CompilerClient the machine depends on."""

    async def get_source(self, source_id: str) -> SourceCode | None: ...

    async def compile(self, source_id: str) -> CompileResponse: ...


class CompileStatusMachine:
    """Drives idle -> compiling -> success | error.

    The compiled binary exists if and only if the status is SUCCESS.
    """

    def __init__(self, compiler: Compiler) -> None:
        self._compiler = compiler
        self._status = CompileStatus.idle()
        self._binary: bytes | None = None
        self._started = False
        self._listeners: list[StatusListener] = []

    @property
    def status(self) -> CompileStatus:
        return self._status

    @property
    def binary(self) -> bytes | None:
        """Compiled bytecode, available only after a successful compile."""
        return self._binary

    @property
    def state(self) -> CompileState:
        return self._status.state

    def subscribe(self, listener: StatusListener) -> None:
        self._listeners.append(listener)

    def _transition(self, status: CompileStatus) -> None:
        self._status = status
        logger.info("compile_status", state=status.state.value, error=status.error)
        for listener in list(self._listeners):
            try:
                listener(status)
            except Exception:
                logger.exception("compile_listener_failed")

    async def run(self, source_id: str | None) -> CompileStatus:
        """Fetch the source for *source_id* and compile it.

        Runs at most once per machine; the terminal status is returned.
        """
        if self._started:
            raise RuntimeError("Compile flow already ran for this session")
        self._started = True
        self._transition(CompileStatus.idle())

        source = await self._compiler.get_source(source_id) if source_id else None
        if source is None:
            self._transition(CompileStatus.failed(NO_SOURCE_MESSAGE))
            return self._status

        self._transition(CompileStatus.compiling())

        try:
            result = await self._compiler.compile(source_id)
        except CompileFailedError:
            self._transition(CompileStatus.failed(COMPILE_FAILED_MESSAGE))
            return self._status

        if not result.succeeded:
            logger.info("compile_rejected", source_id=source_id, diagnostics=result.error)
            self._transition(CompileStatus.failed(COMPILE_FAILED_MESSAGE))
            return self._status

        try:
            binary = base64.b64decode(result.binary, validate=True)
        except (binascii.Error, ValueError):
            logger.warning("compile_binary_undecodable", source_id=source_id)
            self._transition(CompileStatus.failed(COMPILE_FAILED_MESSAGE))
            return self._status

        self._binary = binary
        self._transition(CompileStatus.success())
        return self._status
