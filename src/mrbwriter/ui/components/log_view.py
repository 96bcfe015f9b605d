"""Auto-scrolling device log view."""

from __future__ import annotations

from nicegui import events, ui

from mrbwriter.core.log_buffer import LogBuffer, LogViewport
from mrbwriter.ui.theme import COLORS
from mrbwriter.utils.ansi import parse_ansi


class LogView:
    """Renders a LogBuffer, following new output while pinned to the bottom."""

    def __init__(self, log: LogBuffer) -> None:
        self._viewport = LogViewport()
        self._scroll = ui.scroll_area(on_scroll=self._on_scroll).classes(
            "mx-auto w-[85%] h-80"
        ).style(
            f"background: {COLORS.bg_secondary}; border: 1px solid {COLORS.border}; "
            "resize: vertical; overflow: auto"
        )
        with self._scroll:
            self._lines = ui.column().classes("w-full gap-0 px-2")

        for entry in log.snapshot():
            self._add_line(entry)
        self._unsubscribe = log.subscribe(self._on_append)

    def detach(self) -> None:
        self._unsubscribe()

    def _add_line(self, entry: str) -> None:
        with self._lines:
            with ui.element("div").classes("log-line"):
                for segment in parse_ansi(entry):
                    ui.label(segment.text).style(segment.css)

    def _on_append(self, entry: str, snapshot: tuple[str, ...]) -> None:
        self._add_line(entry)
        self._viewport.render(snapshot)
        if self._viewport.pinned:
            self._scroll.scroll_to(percent=1.0)

    def _on_scroll(self, e: events.ScrollEventArguments) -> None:
        self._viewport.on_scroll(
            e.vertical_position,
            content_height=e.vertical_size,
            viewport_height=e.vertical_container_size,
        )
