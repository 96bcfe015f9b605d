"""Typed view over the preference store."""

from __future__ import annotations

import json

from mrbwriter.config.store import ConfigStore
from mrbwriter.models.target import DEFAULT_TARGET, Target, parse_target
from mrbwriter.utils.logging import get_logger

logger = get_logger(__name__)

TARGET_KEY = "target"
AUTO_CONNECT_KEY = "autoConnect"
AUTHORIZED_PORTS_KEY = "authorizedPorts"


class Preferences:
    """Reads and writes the user's target and auto-connect preferences."""

    def __init__(self, store: ConfigStore) -> None:
        self._store = store

    @property
    def target(self) -> Target:
        return parse_target(self._store.get(TARGET_KEY)) or DEFAULT_TARGET

    @target.setter
    def target(self, value: Target) -> None:
        self._store.set(TARGET_KEY, Target(value).value)

    @property
    def auto_connect(self) -> bool:
        return self._store.get(AUTO_CONNECT_KEY) == "true"

    @auto_connect.setter
    def auto_connect(self, enabled: bool) -> None:
        self._store.set(AUTO_CONNECT_KEY, "true" if enabled else "false")

    @property
    def authorized_ports(self) -> list[str]:
        """Port device paths the user has connected to before, most recent first."""
        raw = self._store.get(AUTHORIZED_PORTS_KEY)
        if not raw:
            return []
        try:
            ports = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("authorized_ports_corrupt", value=raw)
            return []
        if not isinstance(ports, list):
            return []
        return [p for p in ports if isinstance(p, str) and p]

    def authorize_port(self, device: str) -> None:
        """Record *device* as authorized, moving it to the front."""
        ports = [p for p in self.authorized_ports if p != device]
        ports.insert(0, device)
        self._store.set(AUTHORIZED_PORTS_KEY, json.dumps(ports))
