"""Forwards typed commands to the device."""

from __future__ import annotations

from mrbwriter.core.reporting import SEND_FAILED, ErrorReporter
from mrbwriter.core.session import DeviceSession
from mrbwriter.models.outcome import Outcome


class CommandDispatcher:
    """Sends the command field's text as-is; no validation, no history."""

    def __init__(self, session: DeviceSession, reporter: ErrorReporter) -> None:
        self._session = session
        self._reporter = reporter

    async def dispatch(self, text: str) -> Outcome:
        outcome = await self._session.send_command(text)
        if outcome.is_failure:
            await self._reporter.report(SEND_FAILED, outcome.error)
        return outcome
