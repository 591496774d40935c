from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import typer

from channels.line_channel import StreamLineChannel
from cli.render import (
    echo_error,
    render_aggregates,
    render_menu,
    render_reports,
    render_stats,
)
from errors import ChannelConnectionError, ChannelReadError, TelemetryError
from logging_config import configure_logging
from services.monitor import MonitorService, build_default_monitor
from settings import Settings, get_settings


@dataclass
class CLIState:
    settings: Settings
    monitor: MonitorService


app = typer.Typer(
    help="Register sensors, ingest serial telemetry and aggregate readings.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        echo_error("CLI state is uninitialized.")
        raise typer.Exit(code=1)
    return state


@app.callback()
def main(
    ctx: typer.Context,
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Logging level (defaults to LOG_LEVEL env or INFO).",
    ),
) -> None:
    """Entry point for the CLI."""
    configure_logging(log_level)
    monitor = build_default_monitor()
    ctx.obj = CLIState(settings=get_settings(), monitor=monitor)
    ctx.call_on_close(monitor.shutdown)


def _connect(state: CLIState, port: str, baud_rate: Optional[int]) -> bool:
    typer.echo(f"Connecting to {port} ... press Ctrl+C to stop capturing.")
    try:
        stats = state.monitor.connect_and_ingest(port, baud_rate=baud_rate)
    except ChannelConnectionError as exc:
        echo_error(str(exc))
        echo_error("Check that the device is plugged in and that you may read it.")
        return False
    except ChannelReadError as exc:
        echo_error(str(exc))
        return False
    render_stats(stats)
    return True


@app.command("ingest")
def ingest_command(
    ctx: typer.Context,
    port: Optional[str] = typer.Argument(
        None, help="Serial device path (defaults to TELEMETRY_SERIAL_PORT)."
    ),
    baud_rate: Optional[int] = typer.Option(
        None, "--baud-rate", "-r", help="Transmission rate; unsupported values fall back to 9600."
    ),
) -> None:
    """Capture readings from a serial device, then print aggregates."""
    state = _get_state(ctx)
    if not _connect(state, port or state.settings.serial_port, baud_rate):
        raise typer.Exit(code=1)
    typer.echo()
    render_aggregates(state.monitor.process_all())


@app.command("replay")
def replay_command(
    ctx: typer.Context,
    file: Path = typer.Argument(
        ..., exists=True, dir_okay=False, readable=True, help="Captured transmission file."
    ),
) -> None:
    """Ingest a captured transmission file and print reports and aggregates."""
    state = _get_state(ctx)
    channel = StreamLineChannel(poll_interval=state.settings.poll_interval)
    try:
        channel.open(str(file))
    except ChannelConnectionError as exc:
        echo_error(str(exc))
        raise typer.Exit(code=1) from exc
    with channel:
        stats = state.monitor.ingest_channel(channel)
    render_stats(stats)
    typer.echo()
    render_reports(state.monitor.reports())
    render_aggregates(state.monitor.process_all())


@app.command("menu")
def menu_command(ctx: typer.Context) -> None:
    """Run the interactive sensor menu."""
    state = _get_state(ctx)
    monitor = state.monitor

    while True:
        render_menu()
        choice = typer.prompt("Selection").strip()

        if choice == "5":
            typer.echo("Releasing sensors and exiting.")
            return

        try:
            if choice in ("1", "2"):
                identifier = typer.prompt("Sensor identifier")
                if choice == "1":
                    sensor = monitor.register_thermal(identifier)
                else:
                    sensor = monitor.register_barometric(identifier)
                typer.secho(
                    f"Registered {sensor.kind.value} sensor {sensor.identifier!r}",
                    fg=typer.colors.GREEN,
                )
            elif choice == "3":
                identifier = typer.prompt("Sensor identifier")
                if monitor.registry.lookup(identifier) is None:
                    echo_error(f"Sensor {identifier!r} is not registered.")
                    continue
                value = typer.prompt("Reading value")
                stored = monitor.add_manual_reading(identifier, value)
                typer.secho(f"Stored {stored} for {identifier!r}", fg=typer.colors.GREEN)
            elif choice == "4":
                render_aggregates(monitor.process_all())
            elif choice == "6":
                port = typer.prompt("Serial device", default=state.settings.serial_port)
                _connect(state, port, None)
            else:
                echo_error(f"Invalid selection {choice!r}.")
        except (TelemetryError, ValueError) as exc:
            echo_error(str(exc))
