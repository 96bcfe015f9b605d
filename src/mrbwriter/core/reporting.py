"""Error-reporting interface used by user-initiated actions."""

from __future__ import annotations

import abc

from mrbwriter.exceptions import MrbWriterError
from mrbwriter.utils.logging import get_logger

logger = get_logger(__name__)

CONNECT_FAILED = "Could not get the port."
LISTEN_FAILED = "An error occurred while receiving."
SEND_FAILED = "An error occurred while sending."
WRITE_FAILED = "An error occurred while writing."


def format_failure(message: str, error: MrbWriterError) -> str:
    """Join the headline, the error and its chained cause."""
    lines = [message, error.message]
    if error.cause is not None:
        lines.append(f"cause: {error.cause}")
    return "\n".join(lines)


class ErrorReporter(abc.ABC):
    """Presents a failure to the user.

    ``report`` resolves once the user has dismissed the notification.
    """

    @abc.abstractmethod
    async def report(self, message: str, error: MrbWriterError) -> None:
        """Show *message* and *error* (with its cause) to the user."""


class LoggingErrorReporter(ErrorReporter):
    """Reporter for headless use: failures only go to the log."""

    async def report(self, message: str, error: MrbWriterError) -> None:
        logger.error(
            "user_action_failed",
            message=message,
            error=error.message,
            cause=str(error.cause) if error.cause else None,
        )
