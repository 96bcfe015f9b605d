"""Supported microcontroller targets and their serial profiles."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class Target(StrEnum):
    """Board family selected for compilation and flashing."""
    RBOARD = "RBoard"
    ESP32 = "ESP32"


DEFAULT_TARGET = Target.RBOARD


@dataclass(frozen=True)
class TargetProfile:
    """Serial line settings for one target."""
    target: Target
    baud_rate: int
    line_ending: str = "\r\n"
    # Seconds to wait for each protocol response
    response_timeout: float = 5.0


_PROFILES: dict[Target, TargetProfile] = {
    Target.RBOARD: TargetProfile(target=Target.RBOARD, baud_rate=19200),
    Target.ESP32: TargetProfile(target=Target.ESP32, baud_rate=115200),
}


def profile_for(target: Target) -> TargetProfile:
    return _PROFILES[target]


def parse_target(value: str | None) -> Target | None:
    """Return the Target for *value*, or None if it is not a known literal."""
    if value is None:
        return None
    try:
        return Target(value)
    except ValueError:
        return None
