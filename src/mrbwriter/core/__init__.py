"""Core domain layer: compile flow, device session and orchestration."""

from mrbwriter.core.autoconnect import AutoConnectPolicy
from mrbwriter.core.compile import CompileStatusMachine
from mrbwriter.core.dispatch import CommandDispatcher
from mrbwriter.core.log_buffer import LogBuffer, LogViewport
from mrbwriter.core.orchestrator import WriterController
from mrbwriter.core.reporting import ErrorReporter, LoggingErrorReporter
from mrbwriter.core.session import DeviceSession, SessionState

__all__ = [
    "AutoConnectPolicy",
    "CommandDispatcher",
    "CompileStatusMachine",
    "DeviceSession",
    "ErrorReporter",
    "LogBuffer",
    "LogViewport",
    "LoggingErrorReporter",
    "SessionState",
    "WriterController",
]
