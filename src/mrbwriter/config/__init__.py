"""Preference persistence."""

from mrbwriter.config.preferences import Preferences
from mrbwriter.config.store import ConfigStore, JsonFileConfigStore, MemoryConfigStore

__all__ = [
    "ConfigStore",
    "JsonFileConfigStore",
    "MemoryConfigStore",
    "Preferences",
]
