"""Exception hierarchy for compile, transport and session failures."""

from __future__ import annotations


class MrbWriterError(Exception):
    """Base exception for all mrbwriter errors."""

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        if cause is not None:
            self.__cause__ = cause

    @property
    def cause(self) -> BaseException | None:
        """The underlying exception, if any."""
        return self.__cause__

    def describe(self) -> str:
        """Human-readable message including the chained cause."""
        if self.__cause__ is None:
            return self.message
        return f"{self.message}\ncause: {self.__cause__}"


class CompileError(MrbWriterError):
    """Error in the fetch-and-compile flow."""


class SourceNotFoundError(CompileError):
    """No source code exists for the requested identifier."""


class CompileFailedError(CompileError):
    """The compiler rejected the source or could not be reached."""


class TransportError(MrbWriterError):
    """Error in the device transport layer."""


class ConnectFailedError(TransportError):
    """Failed to obtain or open a port."""


class ListenFailedError(TransportError):
    """The read loop could not start or terminated with an error."""


class SendFailedError(TransportError):
    """A command could not be written to the device."""


class WriteFailedError(TransportError):
    """Flashing the compiled binary failed."""


class ProtocolError(TransportError):
    """The device answered the writer protocol with an error or garbage."""


class ProtocolTimeoutError(ProtocolError):
    """The device did not answer within the response timeout."""


class AutoConnectSkipped(MrbWriterError):
    """No previously authorized port exists; not a real failure."""