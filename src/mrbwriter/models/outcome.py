"""Success/failure result returned by session operations."""

from __future__ import annotations

from dataclasses import dataclass

from mrbwriter.exceptions import MrbWriterError


@dataclass(frozen=True)
class Outcome:
    """Result of a session operation.

    A failed outcome carries an MrbWriterError; the original exception is
    available as ``error.cause``.
    """
    error: MrbWriterError | None = None

    @classmethod
    def ok(cls) -> Outcome:
        return cls()

    @classmethod
    def fail(cls, error: MrbWriterError) -> Outcome:
        return cls(error=error)

    @property
    def is_success(self) -> bool:
        return self.error is None

    @property
    def is_failure(self) -> bool:
        return self.error is not None
