"""Silent reconnect to a previously authorized port at startup."""

from __future__ import annotations

import inspect
from typing import Awaitable, Callable

from mrbwriter.config.preferences import Preferences
from mrbwriter.core.session import DeviceSession
from mrbwriter.exceptions import AutoConnectSkipped, ConnectFailedError
from mrbwriter.models.outcome import Outcome
from mrbwriter.utils.logging import get_logger

logger = get_logger(__name__)

ReloadHook = Callable[[], Awaitable[None] | None]


class AutoConnectPolicy:
    """Decides whether to reconnect without prompting.

    Failures on this path are logged and returned, never reported to the
    user. Zero authorized ports yields AutoConnectSkipped, which is not an
    error.
    """

    def __init__(
        self,
        session: DeviceSession,
        preferences: Preferences,
        reload: ReloadHook | None = None,
    ) -> None:
        self._session = session
        self._preferences = preferences
        self._reload = reload

    @property
    def enabled(self) -> bool:
        return self._preferences.auto_connect

    async def run(self) -> Outcome:
        """Connect to the first authorized port and listen, if enabled."""
        if not self.enabled:
            return Outcome.fail(AutoConnectSkipped("Auto-connect is disabled"))

        try:
            ports = await self._session.transport.list_authorized_ports()
        except Exception as exc:
            logger.warning("auto_connect_port_lookup_failed", error=str(exc))
            return Outcome.fail(ConnectFailedError("Could not list authorized ports", cause=exc))

        if not ports:
            logger.info("auto_connect_skipped", reason="no_authorized_ports")
            return Outcome.fail(AutoConnectSkipped("No authorized ports"))

        first = ports[0]

        async def pick_first():
            return first

        outcome = await self._session.connect(pick_first)
        if outcome.is_failure:
            logger.info("auto_connect_failed", port=first.device, error=outcome.error.describe())
            return outcome

        logger.info("auto_connect_connected", port=first.device)
        outcome = await self._session.start_listen()
        if outcome.is_failure:
            logger.info("auto_connect_listen_failed", error=outcome.error.describe())
        return outcome

    async def set_enabled(self, enabled: bool) -> None:
        """Persist the flag; enabling it reloads before any connection."""
        self._preferences.auto_connect = enabled
        logger.info("auto_connect_toggled", enabled=enabled)
        if enabled and self._reload is not None:
            result = self._reload()
            if inspect.isawaitable(result):
                await result
