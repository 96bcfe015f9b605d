"""Inline compile status card."""

from __future__ import annotations

from nicegui import ui

from mrbwriter.models.compile import CompileState, CompileStatus
from mrbwriter.ui.theme import COLORS

_LABELS: dict[CompileState, str] = {
    CompileState.IDLE: "Waiting to compile",
    CompileState.COMPILING: "Compiling",
    CompileState.SUCCESS: "Compile finished",
    CompileState.ERROR: "Compile failed",
}


class CompileStatusCard:
    """Persistent, non-blocking compile status display."""

    def __init__(self, status: CompileStatus) -> None:
        self._status = status
        self._card = ui.card().classes("mx-auto px-6 py-2").style(
            f"width: 18rem; background: {COLORS.bg_secondary}; border: 1px solid {COLORS.border}"
        )
        self._render()

    def update(self, status: CompileStatus) -> None:
        self._status = status
        self._render()

    def _render(self) -> None:
        status = self._status
        self._card.clear()
        with self._card:
            with ui.row().classes("w-full items-center justify-center gap-3"):
                ui.label(_LABELS[status.state]).style(f"color: {COLORS.text_primary}")
                if status.state in (CompileState.IDLE, CompileState.COMPILING):
                    ui.spinner(size="1.5rem").style(f"color: {COLORS.cyan}")
                elif status.state == CompileState.SUCCESS:
                    ui.icon("check").style(f"color: {COLORS.green}")
                else:
                    ui.icon("error_outline").style(f"color: {COLORS.red}")
            if status.state == CompileState.ERROR and status.error:
                ui.label(status.error).classes("w-full text-center font-mono").style(
                    f"color: {COLORS.red}; font-size: 13px"
                )
