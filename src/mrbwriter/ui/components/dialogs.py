"""Blocking dialogs: port chooser and error notification."""

from __future__ import annotations

from nicegui import ui

from mrbwriter.core.reporting import ErrorReporter
from mrbwriter.exceptions import ConnectFailedError, MrbWriterError
from mrbwriter.transport.base import PortInfo, Transport
from mrbwriter.ui.theme import COLORS
from mrbwriter.utils.logging import get_logger

logger = get_logger(__name__)


class DialogErrorReporter(ErrorReporter):
    """Shows failures in a modal dialog; resolves when the user closes it."""

    def __init__(self, anchor: ui.element) -> None:
        self._anchor = anchor

    async def report(self, message: str, error: MrbWriterError) -> None:
        logger.info("error_dialog", message=message, error=error.describe())
        with self._anchor:
            with ui.dialog() as dialog, ui.card().classes("p-4"):
                with ui.row().classes("items-center gap-2"):
                    ui.icon("error_outline").style(f"color: {COLORS.red}")
                    ui.label(message).classes("text-subtitle1")
                ui.label(error.message).classes("font-mono").style(
                    f"color: {COLORS.text_secondary}"
                )
                if error.cause is not None:
                    ui.label(f"cause: {error.cause}").classes("font-mono").style(
                        f"white-space: pre-wrap; color: {COLORS.text_muted}"
                    )
                ui.button("OK", on_click=lambda: dialog.submit(True))
        try:
            await dialog
        finally:
            dialog.delete()


class PortChooser:
    """User-driven port picker backed by a selection dialog."""

    def __init__(self, anchor: ui.element, transport: Transport) -> None:
        self._anchor = anchor
        self._transport = transport

    async def __call__(self) -> PortInfo:
        ports = await self._transport.list_ports()
        by_label = {str(p): p for p in ports}

        with self._anchor:
            with ui.dialog() as dialog, ui.card().classes("p-4 w-96"):
                ui.label("Select a serial port").classes("text-subtitle1")
                if by_label:
                    select = ui.select(list(by_label), value=next(iter(by_label))).classes("w-full")
                else:
                    select = None
                    ui.label("No serial ports found.").style(f"color: {COLORS.text_muted}")
                with ui.row().classes("w-full justify-end gap-2"):
                    ui.button("Cancel", on_click=lambda: dialog.submit(None)).props("flat")
                    ui.button(
                        "Connect",
                        icon="usb",
                        on_click=lambda: dialog.submit(select.value if select else None),
                    )
        try:
            chosen = await dialog
        finally:
            dialog.delete()

        if chosen is None or chosen not in by_label:
            raise ConnectFailedError("Port selection was cancelled")
        return by_label[chosen]
