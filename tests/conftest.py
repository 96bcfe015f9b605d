"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from typing import AsyncIterator

import pytest

from mrbwriter.config.preferences import Preferences
from mrbwriter.config.store import MemoryConfigStore
from mrbwriter.exceptions import CompileFailedError, MrbWriterError
from mrbwriter.models.compile import CompileResponse, SourceCode
from mrbwriter.models.target import Target
from mrbwriter.transport.base import PortInfo, Transport


class FakeTransport(Transport):
    """In-memory transport that records every call."""

    def __init__(self, target: Target = Target.RBOARD) -> None:
        super().__init__(target)
        self.ports: list[PortInfo] = [PortInfo("/dev/ttyUSB0"), PortInfo("/dev/ttyUSB1")]
        self.authorized: list[PortInfo] = []
        self.incoming: list[str] = []
        self.read_error: Exception | None = None
        self.open_error: Exception | None = None
        self.send_error: Exception | None = None
        self.write_error: Exception | None = None
        self.opened: list[PortInfo] = []
        self.sent: list[str] = []
        self.written: list[bytes] = []
        self.closed = 0
        self._port: PortInfo | None = None

    @property
    def is_open(self) -> bool:
        return self._port is not None

    @property
    def port(self) -> PortInfo | None:
        return self._port

    async def list_ports(self) -> list[PortInfo]:
        return list(self.ports)

    async def list_authorized_ports(self) -> list[PortInfo]:
        return list(self.authorized)

    async def open(self, port: PortInfo) -> None:
        if self.open_error is not None:
            raise self.open_error
        self.opened.append(port)
        self._port = port

    async def close(self) -> None:
        self.closed += 1
        self._port = None

    async def lines(self) -> AsyncIterator[str]:
        for line in self.incoming:
            yield line
        if self.read_error is not None:
            raise self.read_error
        # Device went away
        self._port = None

    async def send_command(self, text: str) -> None:
        if self.send_error is not None:
            raise self.send_error
        self.sent.append(text)

    async def write_code(self, binary: bytes) -> None:
        if self.write_error is not None:
            raise self.write_error
        self.written.append(binary)


class FakeCompiler:
    """Compiler double with canned sources and responses."""

    def __init__(
        self,
        sources: dict[str, str] | None = None,
        response: CompileResponse | None = None,
        compile_error: Exception | None = None,
    ) -> None:
        self.sources = sources or {}
        self.response = response or CompileResponse(binary="AQID", error="")
        self.compile_error = compile_error
        self.fetched: list[str] = []
        self.compiled: list[str] = []

    async def get_source(self, source_id: str) -> SourceCode | None:
        self.fetched.append(source_id)
        code = self.sources.get(source_id)
        return SourceCode(code=code) if code is not None else None

    async def compile(self, source_id: str) -> CompileResponse:
        self.compiled.append(source_id)
        if self.compile_error is not None:
            raise CompileFailedError("Compile failed.") from self.compile_error
        return self.response


class RecordingReporter:
    """ErrorReporter double that records reports."""

    def __init__(self) -> None:
        self.reports: list[tuple[str, MrbWriterError]] = []

    async def report(self, message: str, error: MrbWriterError) -> None:
        self.reports.append((message, error))


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def preferences() -> Preferences:
    return Preferences(MemoryConfigStore())


@pytest.fixture
def reporter() -> RecordingReporter:
    return RecordingReporter()


@pytest.fixture
def compiler() -> FakeCompiler:
    return FakeCompiler(sources={"abc123": "puts 1"})
