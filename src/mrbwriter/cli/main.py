"""mrbwriter CLI - compile, flash and monitor from the command line."""

from __future__ import annotations

import asyncio
import json

import click

from mrbwriter.core.reporting import CONNECT_FAILED, ErrorReporter, format_failure
from mrbwriter.exceptions import MrbWriterError
from mrbwriter.utils.logging import setup_logging


class ClickErrorReporter(ErrorReporter):
    """Prints failures to stderr."""

    async def report(self, message: str, error: MrbWriterError) -> None:
        click.echo(f"ERROR: {format_failure(message, error)}", err=True)


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--json-output", is_flag=True, help="Output in JSON format")
@click.pass_context
def cli(ctx: click.Context, debug: bool, json_output: bool) -> None:
    """mrbwriter - compile mruby programs remotely and flash them to a board."""
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug
    ctx.obj["json_output"] = json_output
    setup_logging(level="DEBUG" if debug else "WARNING", json_output=json_output)


def _preferences(ctx: click.Context):
    """Open the preference file, once per invocation."""
    from mrbwriter.config.preferences import Preferences
    from mrbwriter.config.store import JsonFileConfigStore
    from mrbwriter.settings import find_preferences_path

    if "preferences" not in ctx.obj:
        ctx.obj["preferences"] = Preferences(JsonFileConfigStore(find_preferences_path()))
    return ctx.obj["preferences"]


@cli.command()
@click.option("--host", default="127.0.0.1", help="Bind address")
@click.option("--port", type=int, default=8000, help="HTTP port")
@click.option("--no-ui", is_flag=True, help="API only, no web page")
@click.pass_context
def serve(ctx: click.Context, host: str, port: int, no_ui: bool) -> None:
    """Start the web server (API + writer page)."""
    import uvicorn
    from mrbwriter.api.app import create_app

    app = create_app(
        enable_ui=not no_ui,
        log_level="DEBUG" if ctx.obj["debug"] else "INFO",
        json_logs=ctx.obj["json_output"],
    )
    uvicorn.run(app, host=host, port=port)


@cli.command()
@click.pass_context
def ports(ctx: click.Context) -> None:
    """List serial ports, marking previously authorized ones."""
    from mrbwriter.transport.uart import SerialTransport

    prefs = _preferences(ctx)
    found = asyncio.run(SerialTransport(prefs.target).list_ports())
    authorized = set(prefs.authorized_ports)

    if ctx.obj.get("json_output"):
        click.echo(json.dumps([
            {"device": p.device, "description": p.description, "authorized": p.device in authorized}
            for p in found
        ], indent=2))
        return
    if not found:
        click.echo("No serial ports found.")
        return
    click.echo(f"Found {len(found)} port(s):")
    for p in found:
        mark = "*" if p.device in authorized else " "
        click.echo(f" {mark} {p}")


@cli.group()
def config() -> None:
    """Show or change stored preferences."""


@config.command("show")
@click.pass_context
def config_show(ctx: click.Context) -> None:
    """Show the stored target and auto-connect flag."""
    prefs = _preferences(ctx)
    data = {
        "target": prefs.target.value,
        "autoConnect": prefs.auto_connect,
        "authorizedPorts": prefs.authorized_ports,
    }
    if ctx.obj.get("json_output"):
        click.echo(json.dumps(data, indent=2))
        return
    click.echo(f"Target:        {data['target']}")
    click.echo(f"Auto connect:  {'on' if data['autoConnect'] else 'off'}")
    click.echo(f"Authorized:    {', '.join(data['authorizedPorts']) or '-'}")


@config.command("target")
@click.argument("name", type=click.Choice(["RBoard", "ESP32"]))
@click.pass_context
def config_target(ctx: click.Context, name: str) -> None:
    """Select the board target."""
    from mrbwriter.models.target import Target

    _preferences(ctx).target = Target(name)
    click.echo(f"Target set to {name}")


@config.command("auto-connect")
@click.argument("state", type=click.Choice(["on", "off"]))
@click.pass_context
def config_auto_connect(ctx: click.Context, state: str) -> None:
    """Enable or disable auto-connect at page load."""
    _preferences(ctx).auto_connect = state == "on"
    click.echo(f"Auto connect {state}")


def _controller(ctx: click.Context, compiler_url: str | None, target: str | None):
    from mrbwriter.compiler.client import CompilerClient
    from mrbwriter.core.orchestrator import WriterController
    from mrbwriter.models.target import Target
    from mrbwriter.settings import load_settings
    from mrbwriter.transport.uart import SerialTransport

    settings = load_settings()
    prefs = _preferences(ctx)
    compiler = CompilerClient(compiler_url or settings.compiler_url, timeout=settings.http_timeout)
    transport = SerialTransport(prefs.target, preferences=prefs)
    controller = WriterController(compiler, transport, prefs, ClickErrorReporter())
    if target:
        controller.session.set_target(Target(target))
    return controller, compiler


def _port_picker(transport, device: str | None):
    from mrbwriter.exceptions import ConnectFailedError
    from mrbwriter.transport.base import PortInfo

    async def pick() -> PortInfo:
        if device:
            return PortInfo(device=device)
        authorized = await transport.list_authorized_ports()
        if not authorized:
            raise ConnectFailedError("No --port given and no previously used port is present")
        return authorized[0]

    return pick


def _echo_log(ctx: click.Context):
    from mrbwriter.utils.ansi import strip_ansi

    json_output = ctx.obj.get("json_output")

    def echo(entry: str, snapshot: tuple[str, ...]) -> None:
        if json_output:
            click.echo(json.dumps({"line": len(snapshot), "text": strip_ansi(entry)}))
        else:
            click.echo(entry)

    return echo


@cli.command()
@click.argument("source_id")
@click.option("--port", "-p", default=None, help="Serial port (defaults to the last used one)")
@click.option("--target", type=click.Choice(["RBoard", "ESP32"]), default=None,
              help="Board target for this run (defaults to the stored one)")
@click.option("--compiler-url", default=None, help="Compiler service base URL")
@click.option("--listen/--no-listen", default=False, help="Keep printing device output after flashing")
@click.pass_context
def flash(
    ctx: click.Context,
    source_id: str,
    port: str | None,
    target: str | None,
    compiler_url: str | None,
    listen: bool,
) -> None:
    """Compile SOURCE_ID remotely and write it to the board."""
    from mrbwriter.models.compile import CompileState

    controller, compiler = _controller(ctx, compiler_url, target)

    async def run() -> int:
        try:
            status = await controller.compile.run(source_id)
            if status.state != CompileState.SUCCESS:
                click.echo(f"ERROR: {status.error}", err=True)
                return 1
            click.echo(f"Compiled {source_id} ({len(controller.compile.binary)} bytes)")

            outcome = await controller.session.connect(
                _port_picker(controller.session.transport, port)
            )
            if outcome.is_failure:
                await ClickErrorReporter().report(CONNECT_FAILED, outcome.error)
                return 1

            outcome = await controller.write_code()
            if outcome.is_failure:
                return 1
            click.echo(f"Written to {controller.session.port} ({controller.target.value})")

            if listen:
                controller.log.subscribe(_echo_log(ctx))
                outcome = await controller.listen()
                if outcome.is_failure:
                    return 1
            return 0
        finally:
            await controller.shutdown()
            await compiler.aclose()

    try:
        code = asyncio.run(run())
    except KeyboardInterrupt:
        code = 0
    ctx.exit(code)


@cli.command()
@click.option("--port", "-p", default=None, help="Serial port (defaults to the last used one)")
@click.option("--target", type=click.Choice(["RBoard", "ESP32"]), default=None)
@click.pass_context
def monitor(ctx: click.Context, port: str | None, target: str | None) -> None:
    """Print device output until interrupted."""
    controller, compiler = _controller(ctx, None, target)
    controller.log.subscribe(_echo_log(ctx))

    async def run() -> int:
        try:
            outcome = await controller.connect(_port_picker(controller.session.transport, port))
            return 0 if outcome.is_success else 1
        finally:
            await controller.shutdown()
            await compiler.aclose()

    try:
        code = asyncio.run(run())
    except KeyboardInterrupt:
        code = 0
    ctx.exit(code)


if __name__ == "__main__":
    cli()
