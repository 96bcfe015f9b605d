"""String key-value preference stores."""

from __future__ import annotations

import abc
import json
import threading
from pathlib import Path

from mrbwriter.utils.logging import get_logger

logger = get_logger(__name__)


class ConfigStore(abc.ABC):
    """Durable string-typed key-value store."""

    @abc.abstractmethod
    def get(self, key: str) -> str | None:
        """Return the stored value for *key*, or None if absent."""

    @abc.abstractmethod
    def set(self, key: str, value: str) -> None:
        """Persist *value* under *key*."""


class MemoryConfigStore(ConfigStore):
    """Non-persistent store, used by tests and one-shot CLI runs."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value


class JsonFileConfigStore(ConfigStore):
    """Store backed by a flat JSON object on disk.

    Every ``set`` rewrites the whole file through a temporary sibling so a
    crash mid-write never leaves a truncated preference file behind.
    """

    def __init__(self, path: Path) -> None:
        self._path = path
        self._lock = threading.Lock()
        self._values = self._load()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            logger.warning("preferences_unreadable", path=str(self._path), exc_info=True)
            return {}
        if not isinstance(data, dict):
            logger.warning("preferences_not_an_object", path=str(self._path))
            return {}
        values: dict[str, str] = {}
        for key, value in data.items():
            if isinstance(value, bool):
                values[key] = "true" if value else "false"
            elif isinstance(value, str):
                values[key] = value
            else:
                logger.warning("preference_value_ignored", key=key, value=value)
        return values

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._values[key] = value
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self._path.with_suffix(self._path.suffix + ".tmp")
            tmp.write_text(json.dumps(self._values, indent=2, sort_keys=True), encoding="utf-8")
            tmp.replace(self._path)
        logger.debug("preference_saved", key=key)
