"""Data models for mrbwriter."""

from mrbwriter.models.compile import (
    CompileResponse,
    CompileState,
    CompileStatus,
    SourceCode,
)
from mrbwriter.models.outcome import Outcome
from mrbwriter.models.target import (
    DEFAULT_TARGET,
    Target,
    TargetProfile,
    parse_target,
    profile_for,
)

__all__ = [
    "CompileResponse",
    "CompileState",
    "CompileStatus",
    "DEFAULT_TARGET",
    "Outcome",
    "SourceCode",
    "Target",
    "TargetProfile",
    "parse_target",
    "profile_for",
]
