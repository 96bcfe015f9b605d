"""Compiler service payloads and compile status."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field


class CompileState(StrEnum):
    """Lifecycle of the fetch-and-compile flow for one page load."""
    IDLE = "idle"
    COMPILING = "compiling"
    SUCCESS = "success"
    ERROR = "error"


TERMINAL_STATES = frozenset({CompileState.SUCCESS, CompileState.ERROR})


class CompileStatus(BaseModel):
    """Current compile status; ``error`` is set only in the ERROR state."""
    model_config = {"frozen": True}

    state: CompileState = CompileState.IDLE
    error: str | None = Field(default=None, description="Human-readable failure message")

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    @classmethod
    def idle(cls) -> CompileStatus:
        return cls(state=CompileState.IDLE)

    @classmethod
    def compiling(cls) -> CompileStatus:
        return cls(state=CompileState.COMPILING)

    @classmethod
    def success(cls) -> CompileStatus:
        return cls(state=CompileState.SUCCESS)

    @classmethod
    def failed(cls, message: str) -> CompileStatus:
        return cls(state=CompileState.ERROR, error=message)


class SourceCode(BaseModel):
    """Body of ``GET /code/{id}``."""
    code: str = Field(description="Program source text")


class CompileResponse(BaseModel):
    """Body of ``POST /code/{id}/compile``."""
    binary: str = Field(default="", description="Base64-encoded bytecode")
    error: str = Field(default="", description="Compiler diagnostics; empty on success")

    @property
    def succeeded(self) -> bool:
        return self.error == ""
