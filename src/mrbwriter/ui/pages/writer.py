"""Writer page: compile status, target, connect/flash, device log and command line."""

from __future__ import annotations

from nicegui import background_tasks, ui

from mrbwriter.compiler.client import CompilerClient
from mrbwriter.config.preferences import Preferences
from mrbwriter.core.orchestrator import WriterController
from mrbwriter.core.session import SessionState
from mrbwriter.models.target import Target
from mrbwriter.transport.uart import SerialTransport
from mrbwriter.ui.components.compile_status import CompileStatusCard
from mrbwriter.ui.components.dialogs import DialogErrorReporter, PortChooser
from mrbwriter.ui.components.log_view import LogView
from mrbwriter.ui.theme import COLORS, GLOBAL_CSS
from mrbwriter.utils.logging import get_logger

logger = get_logger(__name__)


async def writer_page(
    source_id: str | None,
    preferences: Preferences,
    compiler_url: str,
    http_timeout: float,
) -> None:
    """Render the writer page for the program identified by *source_id*."""
    logger.info("writer_page_opened", source_id=source_id)
    ui.add_css(GLOBAL_CSS)
    ui.dark_mode(True)
    ui.colors(primary=COLORS.cyan, secondary=COLORS.blue, accent=COLORS.purple)

    anchor = ui.element("div")
    compiler = CompilerClient(compiler_url, timeout=http_timeout)
    transport = SerialTransport(preferences.target, preferences=preferences)
    controller = WriterController(
        compiler,
        transport,
        preferences,
        DialogErrorReporter(anchor),
        reload=ui.navigate.reload,
    )
    choose_port = PortChooser(anchor, transport)

    with ui.column().classes("w-full items-center gap-4 q-pa-md"):
        ui.label("Writer").classes("text-h4").style(f"color: {COLORS.text_primary}")

        status_card = CompileStatusCard(controller.compile_status)
        controller.compile.subscribe(status_card.update)

        def on_target_change(e) -> None:
            controller.select_target(Target(e.value))

        ui.radio(
            {t.value: t.value for t in Target},
            value=controller.target.value,
            on_change=on_target_change,
        ).props("inline")

        with ui.row().classes("justify-center gap-4"):
            async def connect() -> None:
                await controller.connect(choose_port)

            async def write_code() -> None:
                await controller.write_code()

            ui.button("Connect", icon="usb", on_click=connect)
            ui.button("Write", icon="flag", on_click=write_code)

        connection = ui.label("Not connected").style(f"color: {COLORS.text_secondary}")

        def on_session_state(state: SessionState) -> None:
            if state == SessionState.CONNECTED:
                connection.text = f"Connected to {controller.session.port}"
            elif state == SessionState.CONNECTING:
                connection.text = "Connecting..."
            else:
                connection.text = "Not connected"

        controller.session.on_state_change(on_session_state)

        async def on_auto_connect(e) -> None:
            await controller.set_auto_connect(bool(e.value))

        ui.checkbox(
            "Auto connect",
            value=controller.auto_connect.enabled,
            on_change=on_auto_connect,
        )

        log_view = LogView(controller.log)

        with ui.row().classes("w-[85%] items-center gap-2"):
            command = ui.input(placeholder="Command").classes("grow")

            async def send() -> None:
                await controller.send(command.value or "")

            ui.button("Send", on_click=send)

    client = ui.context.client

    async def on_disconnect() -> None:
        log_view.detach()
        await controller.shutdown()
        await compiler.aclose()

    client.on_disconnect(on_disconnect)

    await client.connected()
    background_tasks.create(controller.startup(source_id), name="writer_startup")
