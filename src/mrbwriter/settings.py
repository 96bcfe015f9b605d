"""Environment-driven settings and file locations."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_COMPILER_URL = "http://localhost:8080"
DEFAULT_HTTP_TIMEOUT = 30.0

# Relative to the user's home directory
CONFIG_SUBDIR = ".config/mrbwriter"
PREFERENCES_FILENAME = "preferences.json"


@dataclass(frozen=True)
class Settings:
    """Runtime settings resolved from the environment."""
    compiler_url: str = DEFAULT_COMPILER_URL
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    preferences_path: Path | None = None


def find_preferences_path() -> Path:
    """Find the preference file location.

    Search order:
        1. MRBWRITER_CONFIG environment variable (explicit override)
        2. ~/.config/mrbwriter/preferences.json
    """
    env_path = os.environ.get("MRBWRITER_CONFIG")
    if env_path:
        return Path(env_path).expanduser()
    return Path.home() / CONFIG_SUBDIR / PREFERENCES_FILENAME


def load_settings() -> Settings:
    """Build Settings from MRBWRITER_* environment variables."""
    timeout_raw = os.environ.get("MRBWRITER_HTTP_TIMEOUT")
    try:
        timeout = float(timeout_raw) if timeout_raw else DEFAULT_HTTP_TIMEOUT
    except ValueError as exc:
        raise ValueError(f"Invalid MRBWRITER_HTTP_TIMEOUT: {timeout_raw!r}") from exc

    return Settings(
        compiler_url=os.environ.get("MRBWRITER_COMPILER_URL") or DEFAULT_COMPILER_URL,
        http_timeout=timeout,
        preferences_path=find_preferences_path(),
    )
